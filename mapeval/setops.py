"""
Set algebra between two voxel grids.

Every operation walks the data blocks of one grid and, where needed, looks up
the same global index in the other grid. Results are sets of global index
tuples so membership is unique by construction.
"""

import logging
from typing import Iterator, Set, Tuple

import numpy as np

from mapeval.index import GlobalIndex, as_index
from mapeval.layer import VoxelGrid
from mapeval.voxel import VoxelState

logger = logging.getLogger(__name__)

IndexSet = Set[GlobalIndex]


def iter_voxels_with_state(layer: VoxelGrid, state: VoxelState) -> Iterator[GlobalIndex]:
    """
    Yield the global index of every voxel in ``layer`` classified as ``state``.

    Only data blocks are visited. Classification is done per block with the
    layer's own voxel kind.
    """
    for _, block in layer.iter_blocks():
        states = layer.voxel_kind.classify_voxels(block.voxels, layer.voxel_size)
        linear_indices = np.flatnonzero(states == state)
        if len(linear_indices) == 0:
            continue
        for index in block.global_indices(linear_indices):
            yield as_index(index)


def compute_intersection_and_difference(
    reference: VoxelGrid, candidate: VoxelGrid
) -> Tuple[IndexSet, IndexSet]:
    """
    Compare the occupied voxels of ``reference`` against ``candidate``.

    Each voxel occupied in ``reference`` goes into ``intersection`` when the
    same index is also occupied in ``candidate`` and into ``difference``
    otherwise. Voxels occupied only in ``candidate`` are not visited; swap
    the arguments for the other direction.

    Args:
        reference: Grid whose occupied voxels are enumerated
        candidate: Grid queried at each of those indices

    Returns:
        Tuple of (intersection, difference) index sets
    """
    intersection: IndexSet = set()
    difference: IndexSet = set()

    for index in iter_voxels_with_state(reference, VoxelState.OCCUPIED):
        if candidate.classify(index) == VoxelState.OCCUPIED:
            intersection.add(index)
        else:
            difference.add(index)

    logger.debug(
        f"Intersection/difference: {len(intersection)} shared, {len(difference)} missing"
    )
    return intersection, difference


def compute_free_vs_unknown_split(layer: VoxelGrid, other_layer: VoxelGrid) -> IndexSet:
    """
    Find voxels left unexplored by both grids.

    Args:
        layer: Grid whose unknown voxels are enumerated
        other_layer: Grid queried at each of those indices

    Returns:
        Indices unknown in ``layer`` and absent or unknown in ``other_layer``
    """
    unobserved: IndexSet = set()
    for index in iter_voxels_with_state(layer, VoxelState.UNKNOWN):
        if not other_layer.voxel_kind.is_observed(other_layer.voxel_at(index)):
            unobserved.add(index)

    logger.debug(f"Unobserved in both grids: {len(unobserved)} voxels")
    return unobserved


def collect_observed_voxels(layer: VoxelGrid) -> IndexSet:
    """Every voxel with weight above epsilon, occupied or free."""
    observed: IndexSet = set()
    for _, block in layer.iter_blocks():
        linear_indices = np.flatnonzero(layer.voxel_kind.observed_mask(block.voxels))
        for index in block.global_indices(linear_indices):
            observed.add(as_index(index))
    return observed
