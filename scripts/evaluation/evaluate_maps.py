#!/usr/bin/env python3
"""
Map Evaluation CLI

Compares an observed voxel map against a ground-truth map and reports IoU,
precision, recall and the observed fraction of the ground truth. Optionally
appends the metrics to a CSV file and publishes the comparison point clouds.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.append(str(project_root))

from mapeval.config import load_evaluation_config  # noqa: E402
from mapeval.evaluation import GridMismatchError, MapEvaluator  # noqa: E402
from mapeval.metrics import EvaluationMetrics, format_report  # noqa: E402
from scripts.evaluation.grid_io import load_grid  # noqa: E402
from scripts.evaluation.visualization import PointCloudPublisher  # noqa: E402

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_OUTPUT_ERROR = 1
EXIT_GRID_MISMATCH = 2


def setup_logging(log_level: str = "INFO") -> None:
    """Configure logging for the evaluation run."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def append_metrics(metrics: EvaluationMetrics, output_path: Path) -> None:
    """Append one ``observed_fraction,iou,precision,recall`` line to ``output_path``."""
    with open(output_path, "a") as f:
        f.write(metrics.as_csv_row() + "\n")
    logger.info(f"Appended metrics to {output_path}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Evaluate an observed voxel map against a ground-truth map"
    )
    parser.add_argument("ground_truth", type=Path, help="Ground-truth grid file (.npz)")
    parser.add_argument("observed", type=Path, help="Observed grid file (.npz)")
    parser.add_argument(
        "output",
        type=Path,
        nargs="?",
        help="Optional metrics file; one comma-separated line is appended per run",
    )
    parser.add_argument(
        "--publish",
        action="store_true",
        help="Write comparison point clouds and a preview render",
    )
    parser.add_argument(
        "--config", type=Path, default=None, help="Path to configuration file (config.yaml)"
    )
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    config = load_evaluation_config(args.config)
    setup_logging("DEBUG" if args.verbose else config["log_level"])

    ground_truth = load_grid(args.ground_truth)
    observed = load_grid(args.observed)

    try:
        result = MapEvaluator(config).evaluate(ground_truth, observed)
    except GridMismatchError as e:
        logger.error(f"Error! {e}")
        return EXIT_GRID_MISMATCH

    print(format_report(result.metrics))

    exit_code = EXIT_OK
    if args.output is not None:
        try:
            append_metrics(result.metrics, args.output)
        except OSError as e:
            logger.error(f"Unable to open {args.output}: {e}")
            exit_code = EXIT_OUTPUT_ERROR

    if args.publish:
        print("Publishing voxels comparison!")
        publisher = PointCloudPublisher(config["publish_dir"])
        publisher.publish(result, ground_truth.voxel_size)

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
