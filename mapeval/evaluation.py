"""
Ground-truth versus observed map evaluation.

Runs the set operations in both directions, applies the optional pruning and
frontier stages selected in the configuration, and reduces the result to
:class:`~mapeval.metrics.EvaluationMetrics`.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from mapeval.config import merge_evaluation_config
from mapeval.frontier import FrontierResult, compute_frontier_candidates, grid_index_bounds
from mapeval.layer import VoxelGrid
from mapeval.metrics import EvaluationMetrics, compute_metrics
from mapeval.pruning import prune_interior_voxels, prune_out_of_bounds
from mapeval.setops import IndexSet, compute_intersection_and_difference

logger = logging.getLogger(__name__)


class GridMismatchError(ValueError):
    """Raised when two grids cannot be compared voxel by voxel."""

    pass


def check_compatible(ground_truth: VoxelGrid, observed: VoxelGrid) -> None:
    """
    Reject grid pairs with different voxel sizes.

    Raises:
        GridMismatchError: If the voxel sizes differ
    """
    if ground_truth.voxel_size != observed.voxel_size:
        raise GridMismatchError(
            "Observed and ground truth grids must have the same voxel size "
            f"(ground truth {ground_truth.voxel_size}, observed {observed.voxel_size})"
        )
    if ground_truth.voxels_per_side != observed.voxels_per_side:
        logger.debug(
            f"Block sizes differ (ground truth {ground_truth.voxels_per_side}, "
            f"observed {observed.voxels_per_side}); comparing by global index"
        )


@dataclass
class EvaluationResult:
    """Index sets and metrics produced by one evaluation run."""

    intersection_gt: IndexSet
    difference_gt: IndexSet
    intersection_observed: IndexSet
    difference_observed: IndexSet
    metrics: EvaluationMetrics
    frontier: Optional[FrontierResult] = None
    pruned: Dict[str, int] = field(default_factory=dict)


class MapEvaluator:
    """Compare an observed map against a ground-truth map."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize evaluator.

        Args:
            config: ``evaluation`` configuration section; missing keys take
                their defaults
        """
        self.config = merge_evaluation_config(config)

    def evaluate(self, ground_truth: VoxelGrid, observed: VoxelGrid) -> EvaluationResult:
        """
        Evaluate ``observed`` against ``ground_truth``.

        Args:
            ground_truth: Reference grid
            observed: Grid built by the mapping run

        Returns:
            :class:`EvaluationResult`

        Raises:
            GridMismatchError: If the grids have different voxel sizes
        """
        check_compatible(ground_truth, observed)

        intersection_gt, difference_gt = compute_intersection_and_difference(
            ground_truth, observed
        )
        intersection_observed, difference_observed = compute_intersection_and_difference(
            observed, ground_truth
        )
        pruned: Dict[str, int] = {}

        if self.config["prune_interior"]:
            kept = prune_interior_voxels(ground_truth, difference_gt)
            pruned["interior"] = len(difference_gt) - len(kept)
            difference_gt = kept

        if self.config["prune_outliers"]:
            kept = prune_out_of_bounds(
                ground_truth,
                difference_observed,
                include_origin=self.config["bounding_box_includes_origin"],
            )
            pruned["outliers"] = len(difference_observed) - len(kept)
            difference_observed = kept

        frontier = None
        seed_point = self.config["frontier"].get("seed_point")
        if seed_point is not None:
            bounds = grid_index_bounds(ground_truth, observed)
            frontier = compute_frontier_candidates(observed, seed_point, bounds=bounds)
            if frontier.explored:
                reachable = frontier.explored | frontier.unique_obstacles
                kept = difference_gt & reachable
                pruned["unreachable"] = len(difference_gt) - len(kept)
                difference_gt = kept
            else:
                logger.warning(
                    f"Frontier search from {frontier.seed} explored nothing within {bounds}; "
                    "keeping all missed ground-truth voxels"
                )

        for stage, count in pruned.items():
            logger.info(f"Pruned {count} voxels in {stage} stage")

        metrics = compute_metrics(
            intersection_gt, difference_gt, intersection_observed, difference_observed
        )
        return EvaluationResult(
            intersection_gt=intersection_gt,
            difference_gt=difference_gt,
            intersection_observed=intersection_observed,
            difference_observed=difference_observed,
            metrics=metrics,
            frontier=frontier,
            pruned=pruned,
        )


def evaluate_maps(
    ground_truth: VoxelGrid, observed: VoxelGrid, config: Optional[Dict[str, Any]] = None
) -> EvaluationResult:
    """Convenience wrapper around :class:`MapEvaluator`."""
    return MapEvaluator(config).evaluate(ground_truth, observed)
