"""
Index arithmetic for block-partitioned voxel grids.

A voxel is addressed three ways:

- a global index ``(x, y, z)`` on the unbounded integer lattice,
- a block index plus a local voxel index inside that block,
- a block index plus a linear index into the block's flat storage.

All conversions here are exact inverses of each other.
"""

from typing import Iterable, Sequence, Tuple

import numpy as np

GlobalIndex = Tuple[int, int, int]
BlockIndex = Tuple[int, int, int]
VoxelIndex = Tuple[int, int, int]

# Full 3D adjacency around a voxel, excluding the voxel itself.
NEIGHBOR_OFFSETS_26: Tuple[GlobalIndex, ...] = (
    (1, 0, 0),
    (1, 1, 0),
    (1, -1, 0),
    (1, 0, 1),
    (1, 1, 1),
    (1, -1, 1),
    (1, 0, -1),
    (1, 1, -1),
    (1, -1, -1),
    (0, 1, 0),
    (0, -1, 0),
    (0, 0, 1),
    (0, 1, 1),
    (0, -1, 1),
    (0, 0, -1),
    (0, 1, -1),
    (0, -1, -1),
    (-1, 0, 0),
    (-1, 1, 0),
    (-1, -1, 0),
    (-1, 0, 1),
    (-1, 1, 1),
    (-1, -1, 1),
    (-1, 0, -1),
    (-1, 1, -1),
    (-1, -1, -1),
)


def block_and_voxel_index_from_global(
    index: Sequence[int], voxels_per_side: int
) -> Tuple[BlockIndex, VoxelIndex]:
    """
    Split a global voxel index into its block index and local voxel index.

    Uses floor division so negative coordinates land in the block below
    the origin rather than being truncated towards zero.

    Args:
        index: Global voxel index
        voxels_per_side: Number of voxels along one block edge

    Returns:
        Tuple of (block index, local voxel index)
    """
    block = tuple(int(c) // voxels_per_side for c in index)
    voxel = tuple(int(c) - b * voxels_per_side for c, b in zip(index, block))
    return block, voxel  # type: ignore[return-value]


def block_index_from_global(index: Sequence[int], voxels_per_side: int) -> BlockIndex:
    """Block containing the given global voxel index."""
    return block_and_voxel_index_from_global(index, voxels_per_side)[0]


def voxel_index_from_global(index: Sequence[int], voxels_per_side: int) -> VoxelIndex:
    """Local voxel index of a global voxel index inside its block."""
    return block_and_voxel_index_from_global(index, voxels_per_side)[1]


def global_index_from_block_and_voxel(
    block_index: Sequence[int], voxel_index: Sequence[int], voxels_per_side: int
) -> GlobalIndex:
    """Inverse of :func:`block_and_voxel_index_from_global`."""
    return tuple(  # type: ignore[return-value]
        int(b) * voxels_per_side + int(v) for b, v in zip(block_index, voxel_index)
    )


def linear_index_from_voxel_index(voxel_index: Sequence[int], voxels_per_side: int) -> int:
    """Flatten a local voxel index, x varying fastest."""
    x, y, z = (int(c) for c in voxel_index)
    return x + voxels_per_side * (y + voxels_per_side * z)


def voxel_index_from_linear_index(linear_index: int, voxels_per_side: int) -> VoxelIndex:
    """Inverse of :func:`linear_index_from_voxel_index`."""
    linear_index = int(linear_index)
    x = linear_index % voxels_per_side
    y = (linear_index // voxels_per_side) % voxels_per_side
    z = linear_index // (voxels_per_side * voxels_per_side)
    return (x, y, z)


def voxel_indices_from_linear_indices(
    linear_indices: np.ndarray, voxels_per_side: int
) -> np.ndarray:
    """
    Vectorised :func:`voxel_index_from_linear_index`.

    Args:
        linear_indices: 1D integer array of linear indices
        voxels_per_side: Number of voxels along one block edge

    Returns:
        (N, 3) int64 array of local voxel indices
    """
    linear_indices = np.asarray(linear_indices, dtype=np.int64)
    x = linear_indices % voxels_per_side
    y = (linear_indices // voxels_per_side) % voxels_per_side
    z = linear_indices // (voxels_per_side * voxels_per_side)
    return np.stack([x, y, z], axis=1)


def center_point_from_index(index: Sequence[int], voxel_size: float) -> np.ndarray:
    """World coordinates of a voxel centre: ``index * voxel_size + voxel_size / 2``."""
    return np.asarray(index, dtype=np.float64) * voxel_size + (voxel_size / 2)


def center_points_from_indices(indices: np.ndarray, voxel_size: float) -> np.ndarray:
    """Vectorised :func:`center_point_from_index` over an (N, 3) array."""
    indices = np.asarray(indices, dtype=np.float64).reshape(-1, 3)
    return indices * voxel_size + (voxel_size / 2)


def index_from_point(point: Sequence[float], voxel_size: float) -> GlobalIndex:
    """Global index of the voxel containing a world-space point."""
    if voxel_size <= 0:
        raise ValueError(f"voxel_size must be positive, got {voxel_size}")
    scaled = np.floor(np.asarray(point, dtype=np.float64) / voxel_size)
    return tuple(int(c) for c in scaled)  # type: ignore[return-value]


def index_array(indices: Iterable[Sequence[int]]) -> np.ndarray:
    """
    Convert a collection of global indices into a deterministic array.

    Args:
        indices: Any iterable of 3-element indices (set, list, array)

    Returns:
        (N, 3) int64 array sorted lexicographically by (x, y, z)
    """
    array = np.array(list(indices), dtype=np.int64).reshape(-1, 3)
    if len(array) == 0:
        return array
    order = np.lexsort((array[:, 2], array[:, 1], array[:, 0]))
    return array[order]


def as_index(index: Sequence[int]) -> GlobalIndex:
    """Normalise any 3-element index (tuple, list, numpy row) to a tuple of ints."""
    x, y, z = index
    return (int(x), int(y), int(z))
