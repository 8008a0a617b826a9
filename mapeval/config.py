"""
Configuration loading for map evaluation.

Handles loading evaluation parameters from config.yaml files.
"""

import copy
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_EVALUATION_CONFIG: Dict[str, Any] = {
    "publish_dir": "eval_output",
    "prune_interior": False,
    "prune_outliers": False,
    "bounding_box_includes_origin": False,
    "frontier": {
        "seed_point": None,
    },
    "log_level": "INFO",
}


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load full configuration from config.yaml.

    Args:
        config_path: Path to config.yaml file

    Returns:
        Dictionary with full configuration

    Raises:
        FileNotFoundError: If config file doesn't exist
    """
    if config_path is None:
        config_path = Path("config.yaml")

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        config = yaml.safe_load(f)

    return config or {}


def merge_evaluation_config(overrides: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Overlay an ``evaluation`` section on the defaults and validate it."""
    config = copy.deepcopy(DEFAULT_EVALUATION_CONFIG)
    for key, value in (overrides or {}).items():
        if isinstance(config.get(key), dict):
            # A bare ``frontier:`` key in YAML loads as None.
            if value is None:
                continue
            if not isinstance(value, dict):
                raise ValueError(f"Config section '{key}' must be a mapping, got {value!r}")
            config[key].update(value)
        else:
            config[key] = value

    seed_point = config["frontier"].get("seed_point")
    if seed_point is not None and len(seed_point) != 3:
        raise ValueError(f"frontier.seed_point must have 3 coordinates, got {seed_point}")

    return config


def load_evaluation_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load the ``evaluation`` section of config.yaml merged over the defaults.

    Args:
        config_path: Path to config.yaml file. ``None`` returns the defaults.

    Returns:
        Dictionary with evaluation configuration

    Raises:
        FileNotFoundError: If an explicit config file doesn't exist
    """
    if config_path is None:
        return merge_evaluation_config(None)

    config = load_config(config_path)
    return merge_evaluation_config(config.get("evaluation", {}))
