"""
Occupancy map evaluation metrics.

Combines the intersection/difference sets computed in both directions
(ground truth as reference, then observed map as reference) into IoU,
precision, recall and the observed fraction of the ground truth.

Metrics whose denominator is zero are reported as NaN.
"""

import logging
import math
import numbers
from dataclasses import asdict, dataclass
from typing import Any, Dict, Sized, Union

logger = logging.getLogger(__name__)

CountLike = Union[int, Sized]


def _count(value: CountLike) -> int:
    return int(value) if isinstance(value, numbers.Integral) else len(value)


def _ratio(numerator: int, denominator: int, name: str) -> float:
    if denominator == 0:
        logger.warning(f"{name} is undefined: denominator is zero")
        return math.nan
    return numerator / float(denominator)


@dataclass
class EvaluationMetrics:
    """Scalar summary of one map comparison."""

    intersection_gt: int
    difference_gt: int
    intersection_observed: int
    difference_observed: int
    observed_voxels: int
    ground_truth_occupied: int
    iou: float
    recall: float
    precision: float
    observed_fraction: float

    def as_csv_row(self) -> str:
        """``observed_fraction,iou,precision,recall`` as appended to output files."""
        return f"{self.observed_fraction},{self.iou},{self.precision},{self.recall}"

    def has_undefined(self) -> bool:
        return any(
            math.isnan(value)
            for value in (self.iou, self.recall, self.precision, self.observed_fraction)
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def compute_metrics(
    intersection_gt: CountLike,
    difference_gt: CountLike,
    intersection_observed: CountLike,
    difference_observed: CountLike,
) -> EvaluationMetrics:
    """
    Compute evaluation metrics from intersection/difference results.

    Args:
        intersection_gt: Ground-truth occupied voxels also occupied in the observed map
        difference_gt: Ground-truth occupied voxels missing from the observed map
        intersection_observed: Observed occupied voxels also occupied in the ground truth
        difference_observed: Observed occupied voxels not occupied in the ground truth

    Each argument is either an index collection or its size.

    Returns:
        :class:`EvaluationMetrics`, with NaN for any metric whose denominator is zero
    """
    inter_gt = _count(intersection_gt)
    diff_gt = _count(difference_gt)
    inter_obs = _count(intersection_observed)
    diff_obs = _count(difference_observed)

    observed_voxels = inter_obs + diff_obs
    ground_truth_occupied = inter_gt + diff_gt

    return EvaluationMetrics(
        intersection_gt=inter_gt,
        difference_gt=diff_gt,
        intersection_observed=inter_obs,
        difference_observed=diff_obs,
        observed_voxels=observed_voxels,
        ground_truth_occupied=ground_truth_occupied,
        iou=_ratio(inter_gt, inter_gt + diff_gt + diff_obs, "IoU"),
        recall=_ratio(inter_obs, ground_truth_occupied, "recall"),
        precision=_ratio(inter_obs, observed_voxels, "precision"),
        observed_fraction=_ratio(observed_voxels, ground_truth_occupied, "observed fraction"),
    )


def format_report(metrics: EvaluationMetrics) -> str:
    """Human-readable evaluation summary."""
    lines = [
        "---------- Evaluation -----------",
        f"iou: {metrics.iou:0.2f}",
        f"precision: {metrics.precision:0.2f}",
        f"recall: {metrics.recall:0.2f}",
        f"observed: {metrics.observed_fraction:0.2f}",
        f"gt_occupied_voxels: {metrics.ground_truth_occupied}",
        f"observed_voxels: {metrics.observed_voxels}",
        "---------------------------------",
    ]
    return "\n".join(lines)
