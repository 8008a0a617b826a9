"""
Post-processing filters over index sets.

These filters never grow their input: each returns a new set holding a subset
of the given indices.
"""

import logging
from typing import Iterable, Optional, Tuple

import numpy as np

from mapeval.index import as_index, center_points_from_indices, index_array
from mapeval.layer import VoxelGrid
from mapeval.setops import IndexSet, iter_voxels_with_state
from mapeval.voxel import VoxelState

logger = logging.getLogger(__name__)


def prune_interior_voxels(layer: VoxelGrid, indices: Iterable) -> IndexSet:
    """
    Drop indices that lie inside a solid in ``layer``.

    A voxel is interior when it is observed and its signed distance is
    negative. Such voxels are enclosed by the surface and cannot be seen
    by a sensor.

    Args:
        layer: Grid used to look up each index
        indices: Candidate global indices

    Returns:
        The indices that are not interior in ``layer``
    """
    kind = layer.voxel_kind
    kept = {
        as_index(index) for index in indices if not kind.is_interior(layer.voxel_at(index))
    }
    return kept


def compute_occupied_bounds(
    layer: VoxelGrid, include_origin: bool = False
) -> Optional[Tuple[np.ndarray, np.ndarray]]:
    """
    Axis-aligned box around the centres of all occupied voxels.

    Args:
        layer: Grid whose occupied voxels span the box
        include_origin: Seed the box with the world origin so it always
            contains it. Without it the box is seeded by the first
            occupied voxel.

    Returns:
        ``(min_corner, max_corner)`` as float64 arrays, or ``None`` when the
        layer has no occupied voxel and ``include_origin`` is false
    """
    occupied = index_array(iter_voxels_with_state(layer, VoxelState.OCCUPIED))
    centers = center_points_from_indices(occupied, layer.voxel_size)
    if include_origin:
        centers = np.vstack([np.zeros((1, 3)), centers])

    if len(centers) == 0:
        return None
    return centers.min(axis=0), centers.max(axis=0)


def prune_out_of_bounds(
    layer: VoxelGrid, indices: Iterable, include_origin: bool = False
) -> IndexSet:
    """
    Drop indices whose voxel centre lies outside the occupied bounding box.

    Args:
        layer: Grid whose occupied voxels define the box
        indices: Candidate global indices
        include_origin: See :func:`compute_occupied_bounds`

    Returns:
        Indices whose centre is inside the box on every axis. Empty when the
        layer has no occupied voxel and ``include_origin`` is false.
    """
    candidates = index_array({as_index(index) for index in indices})
    bounds = compute_occupied_bounds(layer, include_origin=include_origin)
    if bounds is None:
        logger.warning("No occupied voxels to bound; pruning all candidate voxels")
        return set()
    if len(candidates) == 0:
        return set()

    lower, upper = bounds
    centers = center_points_from_indices(candidates, layer.voxel_size)
    inside = np.all((centers >= lower) & (centers <= upper), axis=1)

    logger.debug(f"Bounding box {lower} - {upper} keeps {int(inside.sum())}/{len(candidates)}")
    return {as_index(index) for index in candidates[inside]}


def split_observed_vs_unobserved(
    layer: VoxelGrid, indices: Iterable
) -> Tuple[IndexSet, IndexSet]:
    """
    Partition indices by whether ``layer`` has observed them.

    Observed means weight above epsilon, so free voxels count as observed.

    Returns:
        Tuple of (observed, unobserved) index sets
    """
    observed: IndexSet = set()
    unobserved: IndexSet = set()
    kind = layer.voxel_kind
    for index in indices:
        index = as_index(index)
        if kind.is_observed(layer.voxel_at(index)):
            observed.add(index)
        else:
            unobserved.add(index)
    return observed, unobserved
