"""
Voxel kinds and classification.

Each grid stores one kind of voxel record. A kind owns the numpy dtype of its
records and decides whether an observed voxel is occupied. The rule that a
voxel without weight is unknown is shared by every kind and applied first.
"""

import math
from enum import IntEnum
from typing import Dict

import numpy as np

# Minimum integration weight for a voxel to count as observed.
WEIGHT_EPSILON = 1e-6


class VoxelState(IntEnum):
    """Classification outcome of a single voxel."""

    FREE = 0
    OCCUPIED = 1
    UNKNOWN = 2


class VoxelKind:
    """
    Classification capability for one voxel record layout.

    Subclasses provide ``dtype`` and :meth:`occupied_mask`. Everything else is
    derived from those two.
    """

    name = "base"
    dtype = np.dtype([("weight", np.float32)])

    def occupied_mask(self, voxels: np.ndarray, voxel_size: float) -> np.ndarray:
        """Occupied decision for voxels that are already known to be observed."""
        raise NotImplementedError

    def observed_mask(self, voxels: np.ndarray) -> np.ndarray:
        """Voxels carrying any information (``weight > WEIGHT_EPSILON``)."""
        return voxels["weight"] > WEIGHT_EPSILON

    def interior_mask(self, voxels: np.ndarray) -> np.ndarray:
        """Voxels that lie inside a solid. Kinds without a distance have none."""
        return np.zeros(voxels.shape, dtype=bool)

    def classify_voxels(self, voxels: np.ndarray, voxel_size: float) -> np.ndarray:
        """
        Classify an array of voxel records.

        Args:
            voxels: Structured array with this kind's dtype
            voxel_size: Edge length of one voxel

        Returns:
            int8 array of :class:`VoxelState` values, same shape as ``voxels``
        """
        observed = self.observed_mask(voxels)
        occupied = observed & self.occupied_mask(voxels, voxel_size)

        states = np.full(voxels.shape, VoxelState.UNKNOWN, dtype=np.int8)
        states[observed] = VoxelState.FREE
        states[occupied] = VoxelState.OCCUPIED
        return states

    def classify(self, voxel, voxel_size: float) -> VoxelState:
        """Classify one record; ``None`` (absent voxel) is unknown."""
        if voxel is None:
            return VoxelState.UNKNOWN
        return VoxelState(int(self.classify_voxels(np.atleast_1d(voxel), voxel_size)[0]))

    def is_occupied(self, voxel, voxel_size: float) -> bool:
        return self.classify(voxel, voxel_size) == VoxelState.OCCUPIED

    def is_observed(self, voxel) -> bool:
        if voxel is None:
            return False
        return bool(self.observed_mask(np.atleast_1d(voxel))[0])

    def is_interior(self, voxel) -> bool:
        """Observed and inside a solid."""
        if voxel is None:
            return False
        voxels = np.atleast_1d(voxel)
        return bool((self.observed_mask(voxels) & self.interior_mask(voxels))[0])

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class TsdfVoxelKind(VoxelKind):
    """Truncated signed distance voxels: occupied within one voxel of a surface."""

    name = "tsdf"
    dtype = np.dtype([("distance", np.float32), ("weight", np.float32)])

    def occupied_mask(self, voxels: np.ndarray, voxel_size: float) -> np.ndarray:
        return voxels["distance"] <= voxel_size

    def interior_mask(self, voxels: np.ndarray) -> np.ndarray:
        return voxels["distance"] < 0


class OccupancyVoxelKind(VoxelKind):
    """
    Probabilistic occupancy voxels storing log-odds.

    A voxel is occupied when its occupancy probability exceeds
    ``occupancy_threshold``.
    """

    name = "occupancy"
    dtype = np.dtype([("probability_log", np.float32), ("weight", np.float32)])

    def __init__(self, occupancy_threshold: float = 0.5):
        if not 0.0 < occupancy_threshold < 1.0:
            raise ValueError(
                f"occupancy_threshold must be in (0, 1), got {occupancy_threshold}"
            )
        self.occupancy_threshold = occupancy_threshold
        self.threshold_log = math.log(occupancy_threshold / (1.0 - occupancy_threshold))

    def occupied_mask(self, voxels: np.ndarray, voxel_size: float) -> np.ndarray:
        return voxels["probability_log"] > self.threshold_log

    def __repr__(self) -> str:
        return f"OccupancyVoxelKind(occupancy_threshold={self.occupancy_threshold})"


TSDF_VOXEL = TsdfVoxelKind()
OCCUPANCY_VOXEL = OccupancyVoxelKind()

_VOXEL_KINDS: Dict[str, VoxelKind] = {
    TSDF_VOXEL.name: TSDF_VOXEL,
    OCCUPANCY_VOXEL.name: OCCUPANCY_VOXEL,
}


def get_voxel_kind(name: str) -> VoxelKind:
    """Look up a registered voxel kind by name."""
    try:
        return _VOXEL_KINDS[name]
    except KeyError:
        raise ValueError(
            f"Unknown voxel kind '{name}'. Expected one of: {sorted(_VOXEL_KINDS)}"
        ) from None
