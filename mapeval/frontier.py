"""
Frontier flood fill over a voxel grid.

Starting from a seed point, the search expands through free and unknown voxels
using an explicit stack, and records every occupied voxel it bumps into as an
obstacle. The result bounds the region a mapping run could have explored.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from mapeval.index import NEIGHBOR_OFFSETS_26, GlobalIndex, index_from_point
from mapeval.layer import VoxelGrid
from mapeval.setops import IndexSet
from mapeval.voxel import VoxelState

logger = logging.getLogger(__name__)

IndexBounds = Tuple[Sequence[int], Sequence[int]]


@dataclass
class FrontierResult:
    """Output of :func:`compute_frontier_candidates`."""

    seed: GlobalIndex
    explored: IndexSet = field(default_factory=set)
    # May hold the same voxel several times, once per direction it was reached from.
    obstacles: List[GlobalIndex] = field(default_factory=list)

    @property
    def unique_obstacles(self) -> IndexSet:
        return set(self.obstacles)


def voxel_state(index: Sequence[int], layer: VoxelGrid) -> VoxelState:
    """Free, occupied or unknown state of one voxel; unallocated blocks are unknown."""
    return layer.classify(index)


def _in_bounds(index: GlobalIndex, bounds: IndexBounds) -> bool:
    lower, upper = bounds
    return all(lo <= c <= hi for c, lo, hi in zip(index, lower, upper))


def default_search_bounds(layer: VoxelGrid, seed: GlobalIndex) -> IndexBounds:
    """Extent of the layer's data blocks and the seed, grown by one voxel."""
    extent = layer.index_bounds()
    if extent is None:
        lower, upper = seed, seed
    else:
        lower = tuple(min(a, b) for a, b in zip(extent[0], seed))
        upper = tuple(max(a, b) for a, b in zip(extent[1], seed))
    return tuple(c - 1 for c in lower), tuple(c + 1 for c in upper)


def compute_frontier_candidates(
    layer: VoxelGrid,
    initial_point: Sequence[float],
    bounds: Optional[IndexBounds] = None,
) -> FrontierResult:
    """
    Flood fill free and unknown space reachable from ``initial_point``.

    The traversal is depth-first. A neighbour that is free or unknown is
    pushed and marked visited exactly once; an occupied neighbour is appended
    to the obstacle list and never expanded, so it can be recorded again from
    another direction.

    Args:
        layer: Grid to search
        initial_point: World-space seed point
        bounds: Optional inclusive ``(min_index, max_index)`` box. Neighbours
            outside it are ignored. Defaults to the extent of the layer's data
            blocks and the seed, padded by one voxel on every side.

    Returns:
        :class:`FrontierResult` with the explored set and obstacle list
    """
    if not layer.voxel_size > 0:
        raise ValueError(f"voxel_size must be positive, got {layer.voxel_size}")

    seed = index_from_point(initial_point, layer.voxel_size)
    if bounds is None:
        bounds = default_search_bounds(layer, seed)
    elif not _in_bounds(seed, bounds):
        logger.warning(f"Frontier seed {seed} lies outside the search bounds {bounds}")
    result = FrontierResult(seed=seed)
    closed_list = result.explored
    open_stack: List[GlobalIndex] = [seed]

    while open_stack:
        current = open_stack.pop()
        cx, cy, cz = current

        for dx, dy, dz in NEIGHBOR_OFFSETS_26:
            candidate = (cx + dx, cy + dy, cz + dz)
            if candidate in closed_list or not _in_bounds(candidate, bounds):
                continue

            if voxel_state(candidate, layer) == VoxelState.OCCUPIED:
                result.obstacles.append(candidate)
            else:
                open_stack.append(candidate)
                closed_list.add(candidate)

    logger.info(
        f"Frontier search from {seed}: explored {len(result.explored)} voxels, "
        f"{len(result.unique_obstacles)} obstacle voxels"
    )
    return result


def grid_index_bounds(*layers: VoxelGrid) -> Optional[Tuple[GlobalIndex, GlobalIndex]]:
    """Union of the index extents of several grids, or ``None`` if all are empty."""
    extents = [layer.index_bounds() for layer in layers]
    extents = [extent for extent in extents if extent is not None]
    if not extents:
        return None
    lower = tuple(min(extent[0][axis] for extent in extents) for axis in range(3))
    upper = tuple(max(extent[1][axis] for extent in extents) for axis in range(3))
    return lower, upper  # type: ignore[return-value]
