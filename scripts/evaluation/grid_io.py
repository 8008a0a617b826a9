"""
Grid persistence in compressed .npz archives.

Archive layout:

- ``voxel_size``: float scalar
- ``voxels_per_side``: int scalar
- ``voxel_kind``: kind name (``tsdf`` or ``occupancy``)
- ``block_indices``: (B, 3) int64 array
- ``voxels_<field>``: (B, voxels_per_side**3) array per record field
"""

import logging
from pathlib import Path
from typing import Union

import numpy as np

from mapeval.layer import VoxelGrid
from mapeval.voxel import get_voxel_kind

logger = logging.getLogger(__name__)

_FIELD_PREFIX = "voxels_"


def save_grid(grid: VoxelGrid, path: Union[str, Path]) -> Path:
    """
    Save the data blocks of a grid to a compressed .npz archive.

    Args:
        grid: Grid to save
        path: Destination file

    Returns:
        Path of the written file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    blocks = list(grid.iter_blocks())
    block_indices = np.array([index for index, _ in blocks], dtype=np.int64).reshape(-1, 3)

    arrays = {
        "voxel_size": np.float64(grid.voxel_size),
        "voxels_per_side": np.int64(grid.voxels_per_side),
        "voxel_kind": np.str_(grid.voxel_kind.name),
        "block_indices": block_indices,
    }
    for name in grid.voxel_kind.dtype.names:
        field_dtype = grid.voxel_kind.dtype[name]
        stacked = np.array([block.voxels[name] for _, block in blocks], dtype=field_dtype)
        arrays[_FIELD_PREFIX + name] = stacked.reshape(len(blocks), grid.voxels_per_block)

    with open(path, "wb") as f:
        np.savez_compressed(f, **arrays)

    logger.info(f"Saved {len(blocks)} blocks to {path}")
    return path


def load_grid(path: Union[str, Path]) -> VoxelGrid:
    """
    Load a grid written by :func:`save_grid`.

    Args:
        path: Archive to read

    Returns:
        The reconstructed :class:`VoxelGrid`

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the archive is missing keys or has inconsistent shapes
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Grid file not found: {path}")

    with np.load(path, allow_pickle=False) as data:
        required = {"voxel_size", "voxels_per_side", "voxel_kind", "block_indices"}
        missing = required - set(data.files)
        if missing:
            raise ValueError(f"Grid file {path} is missing keys: {sorted(missing)}")

        kind = get_voxel_kind(str(data["voxel_kind"]))
        grid = VoxelGrid(
            voxel_size=float(data["voxel_size"]),
            voxels_per_side=int(data["voxels_per_side"]),
            voxel_kind=kind,
        )
        block_indices = data["block_indices"].reshape(-1, 3)

        fields = {}
        for name in kind.dtype.names:
            key = _FIELD_PREFIX + name
            if key not in data.files:
                raise ValueError(f"Grid file {path} is missing voxel field '{name}'")
            values = data[key]
            if values.shape != (len(block_indices), grid.voxels_per_block):
                raise ValueError(
                    f"Voxel field '{name}' has shape {values.shape}, expected "
                    f"{(len(block_indices), grid.voxels_per_block)}"
                )
            fields[name] = values

    for row, block_index in enumerate(block_indices):
        block = grid.allocate_block(block_index)
        for name, values in fields.items():
            block.voxels[name] = values[row]
        block.has_data = True

    logger.info(f"Loaded {len(block_indices)} blocks from {path} ({kind.name}, {grid.voxel_size})")
    return grid
