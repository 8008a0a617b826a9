"""
Tests for voxel kinds and the unknown/free/occupied classification.
"""

import numpy as np
import pytest

from mapeval.voxel import (
    OCCUPANCY_VOXEL,
    TSDF_VOXEL,
    WEIGHT_EPSILON,
    OccupancyVoxelKind,
    VoxelKind,
    VoxelState,
    get_voxel_kind,
)


def tsdf_voxels(*pairs):
    """Structured TSDF array from (distance, weight) pairs."""
    return np.array(list(pairs), dtype=TSDF_VOXEL.dtype)


class TestTsdfClassification:
    """Test suite for signed-distance voxel classification."""

    def setup_method(self):
        """Set up test environment before each test."""
        self.voxel_size = 0.5

    def test_zero_weight_is_unknown(self):
        voxels = tsdf_voxels((0.0, 0.0), (5.0, 0.0), (-1.0, WEIGHT_EPSILON / 2))
        states = TSDF_VOXEL.classify_voxels(voxels, self.voxel_size)

        assert states.tolist() == [VoxelState.UNKNOWN] * 3

    def test_distance_threshold_is_one_voxel(self):
        """Occupied up to and including one voxel size, free beyond."""
        voxels = tsdf_voxels((0.25, 1.0), (0.5, 1.0), (1.0, 1.0), (-0.75, 1.0))
        states = TSDF_VOXEL.classify_voxels(voxels, self.voxel_size)

        assert states.tolist() == [
            VoxelState.OCCUPIED,
            VoxelState.OCCUPIED,
            VoxelState.FREE,
            VoxelState.OCCUPIED,
        ]

    def test_classification_is_total(self):
        """Every record resolves to exactly one of the three states."""
        rng = np.random.default_rng(7)
        voxels = np.zeros(500, dtype=TSDF_VOXEL.dtype)
        voxels["distance"] = rng.uniform(-1.0, 1.0, size=500)
        voxels["weight"] = rng.choice([0.0, 1e-7, 0.5, 10.0], size=500)

        states = TSDF_VOXEL.classify_voxels(voxels, self.voxel_size)
        assert set(np.unique(states).tolist()) <= {state.value for state in VoxelState}
        assert len(states) == 500

    def test_scalar_helpers(self):
        voxels = tsdf_voxels((-0.5, 1.0), (1.5, 1.0))

        assert TSDF_VOXEL.classify(voxels[0], self.voxel_size) == VoxelState.OCCUPIED
        assert TSDF_VOXEL.is_occupied(voxels[0], self.voxel_size)
        assert TSDF_VOXEL.is_interior(voxels[0])
        assert TSDF_VOXEL.is_observed(voxels[1])
        assert not TSDF_VOXEL.is_occupied(voxels[1], self.voxel_size)
        assert not TSDF_VOXEL.is_interior(voxels[1])

    def test_absent_voxel_is_unknown(self):
        assert TSDF_VOXEL.classify(None, self.voxel_size) == VoxelState.UNKNOWN
        assert not TSDF_VOXEL.is_observed(None)
        assert not TSDF_VOXEL.is_interior(None)


class TestOccupancyClassification:
    """Test suite for probabilistic occupancy voxel classification."""

    def test_log_odds_threshold(self):
        voxels = np.array([(1.5, 1.0), (-1.5, 1.0), (1.5, 0.0)], dtype=OCCUPANCY_VOXEL.dtype)
        states = OCCUPANCY_VOXEL.classify_voxels(voxels, voxel_size=0.1)

        assert states.tolist() == [VoxelState.OCCUPIED, VoxelState.FREE, VoxelState.UNKNOWN]

    def test_custom_threshold(self):
        """A stricter threshold turns weakly occupied voxels free."""
        kind = OccupancyVoxelKind(occupancy_threshold=0.9)
        voxels = np.array([(1.0, 1.0), (3.0, 1.0)], dtype=kind.dtype)

        assert kind.classify_voxels(voxels, 0.1).tolist() == [VoxelState.FREE, VoxelState.OCCUPIED]

    def test_no_interior_notion(self):
        voxels = np.array([(5.0, 1.0)], dtype=OCCUPANCY_VOXEL.dtype)
        assert not OCCUPANCY_VOXEL.is_interior(voxels[0])

    @pytest.mark.parametrize("threshold", [0.0, 1.0, 1.5])
    def test_invalid_threshold(self, threshold):
        with pytest.raises(ValueError):
            OccupancyVoxelKind(occupancy_threshold=threshold)


class TestVoxelKindRegistry:
    """Test suite for voxel kind lookup and extension."""

    def test_lookup_by_name(self):
        assert get_voxel_kind("tsdf") is TSDF_VOXEL
        assert get_voxel_kind("occupancy") is OCCUPANCY_VOXEL

    def test_unknown_name(self):
        with pytest.raises(ValueError, match="Unknown voxel kind"):
            get_voxel_kind("esdf")

    def test_new_kind_only_needs_occupied_mask(self):
        """A new kind supplies the occupied decision; the unknown rule is shared."""

        class HitCountVoxelKind(VoxelKind):
            name = "hits"
            dtype = np.dtype([("hits", np.int32), ("weight", np.float32)])

            def occupied_mask(self, voxels, voxel_size):
                return voxels["hits"] > 2

        kind = HitCountVoxelKind()
        voxels = np.array([(5, 1.0), (1, 1.0), (5, 0.0)], dtype=kind.dtype)

        assert kind.classify_voxels(voxels, 1.0).tolist() == [
            VoxelState.OCCUPIED,
            VoxelState.FREE,
            VoxelState.UNKNOWN,
        ]
