"""
Sparse voxel map evaluation.

Compares a ground-truth occupancy grid with a grid built by a mapping run and
reports intersection, difference, IoU, precision, recall and observed fraction.
"""

from mapeval.evaluation import GridMismatchError, MapEvaluator, evaluate_maps
from mapeval.frontier import compute_frontier_candidates, voxel_state
from mapeval.layer import Block, VoxelGrid
from mapeval.metrics import EvaluationMetrics, compute_metrics
from mapeval.pruning import (
    prune_interior_voxels,
    prune_out_of_bounds,
    split_observed_vs_unobserved,
)
from mapeval.setops import (
    collect_observed_voxels,
    compute_free_vs_unknown_split,
    compute_intersection_and_difference,
)
from mapeval.voxel import (
    OCCUPANCY_VOXEL,
    TSDF_VOXEL,
    WEIGHT_EPSILON,
    OccupancyVoxelKind,
    TsdfVoxelKind,
    VoxelState,
)

__all__ = [
    "Block",
    "EvaluationMetrics",
    "GridMismatchError",
    "MapEvaluator",
    "OCCUPANCY_VOXEL",
    "OccupancyVoxelKind",
    "TSDF_VOXEL",
    "TsdfVoxelKind",
    "VoxelGrid",
    "VoxelState",
    "WEIGHT_EPSILON",
    "collect_observed_voxels",
    "compute_free_vs_unknown_split",
    "compute_frontier_candidates",
    "compute_intersection_and_difference",
    "compute_metrics",
    "evaluate_maps",
    "prune_interior_voxels",
    "prune_out_of_bounds",
    "split_observed_vs_unobserved",
    "voxel_state",
]
