"""
Tests for interior, bounding-box and observed/unobserved filters.
"""

import numpy as np
import pytest

from mapeval.layer import VoxelGrid
from mapeval.pruning import (
    compute_occupied_bounds,
    prune_interior_voxels,
    prune_out_of_bounds,
    split_observed_vs_unobserved,
)
from mapeval.voxel import OCCUPANCY_VOXEL


class TestPruneInterior:
    """Test suite for removing voxels enclosed by a surface."""

    def setup_method(self):
        """Set up test environment before each test."""
        self.grid = VoxelGrid(voxel_size=1.0, voxels_per_side=8)
        self.grid.set_voxel((0, 0, 0), distance=-0.5, weight=1.0)  # interior
        self.grid.set_voxel((1, 0, 0), distance=0.5, weight=1.0)  # surface
        self.grid.set_voxel((2, 0, 0), distance=4.0, weight=1.0)  # free
        self.grid.set_voxel((3, 0, 0), distance=-0.5, weight=0.0)  # never observed

    def test_removes_only_observed_negative_distance(self):
        indices = {(0, 0, 0), (1, 0, 0), (2, 0, 0), (3, 0, 0), (50, 50, 50)}

        kept = prune_interior_voxels(self.grid, indices)

        assert kept == {(1, 0, 0), (2, 0, 0), (3, 0, 0), (50, 50, 50)}

    def test_never_grows_input(self):
        indices = [(0, 0, 0), (1, 0, 0)]
        kept = prune_interior_voxels(self.grid, indices)

        assert len(kept) <= len(indices)
        assert kept <= set(indices)

    def test_occupancy_layer_keeps_everything(self):
        grid = VoxelGrid(voxel_size=1.0, voxels_per_side=8, voxel_kind=OCCUPANCY_VOXEL)
        grid.set_voxel((0, 0, 0), probability_log=3.0, weight=1.0)

        assert prune_interior_voxels(grid, {(0, 0, 0)}) == {(0, 0, 0)}


class TestPruneOutOfBounds:
    """Test suite for bounding-box outlier removal."""

    def setup_method(self):
        """Set up test environment before each test."""
        self.grid = VoxelGrid(voxel_size=1.0, voxels_per_side=8)
        self.grid.set_voxel((2, 2, 2), distance=0.0, weight=1.0)
        self.grid.set_voxel((4, 4, 4), distance=0.0, weight=1.0)
        # Free voxels do not widen the box.
        self.grid.set_voxel((10, 10, 10), distance=5.0, weight=1.0)

    def test_bounds_span_occupied_centers(self):
        lower, upper = compute_occupied_bounds(self.grid)

        assert np.array_equal(lower, [2.5, 2.5, 2.5])
        assert np.array_equal(upper, [4.5, 4.5, 4.5])

    def test_prunes_outside_box(self):
        candidates = {(3, 3, 3), (2, 4, 3), (5, 5, 5), (1, 1, 1), (9, 9, 9)}

        kept = prune_out_of_bounds(self.grid, candidates)

        assert kept == {(3, 3, 3), (2, 4, 3)}

    def test_origin_seeded_box_differs(self):
        """Seeding the box at the origin keeps voxels between the origin and the data."""
        candidates = {(3, 3, 3), (1, 1, 1), (0, 0, 0), (5, 5, 5)}

        data_box = prune_out_of_bounds(self.grid, candidates)
        origin_box = prune_out_of_bounds(self.grid, candidates, include_origin=True)

        assert data_box == {(3, 3, 3)}
        assert origin_box == {(3, 3, 3), (1, 1, 1), (0, 0, 0)}

    def test_empty_occupied_set_prunes_everything(self):
        """A layer without occupied voxels yields an empty result, not an error."""
        grid = VoxelGrid(voxel_size=1.0, voxels_per_side=8)
        grid.set_voxel((1, 1, 1), distance=3.0, weight=1.0)

        assert compute_occupied_bounds(grid) is None
        assert prune_out_of_bounds(grid, {(1, 1, 1), (0, 0, 0)}) == set()
        assert prune_out_of_bounds(grid, {(1, 1, 1), (0, 0, 0)}, include_origin=True) == set()

    def test_empty_candidates(self):
        assert prune_out_of_bounds(self.grid, set()) == set()

    def test_idempotent(self):
        candidates = {(3, 3, 3), (5, 5, 5)}
        assert prune_out_of_bounds(self.grid, candidates) == prune_out_of_bounds(
            self.grid, candidates
        )


class TestSplitObserved:
    """Test suite for splitting indices by observation state."""

    def test_free_voxels_count_as_observed(self):
        grid = VoxelGrid(voxel_size=1.0, voxels_per_side=8)
        grid.set_voxel((0, 0, 0), distance=0.0, weight=1.0)
        grid.set_voxel((1, 0, 0), distance=6.0, weight=1.0)
        grid.set_voxel((2, 0, 0), distance=0.0, weight=0.0)

        observed, unobserved = split_observed_vs_unobserved(
            grid, [(0, 0, 0), (1, 0, 0), (2, 0, 0), (-20, 0, 0)]
        )

        assert observed == {(0, 0, 0), (1, 0, 0)}
        assert unobserved == {(2, 0, 0), (-20, 0, 0)}

    @pytest.mark.parametrize("indices", [[], [(3, 3, 3)]])
    def test_partition_covers_input(self, indices):
        grid = VoxelGrid(voxel_size=1.0, voxels_per_side=8)
        observed, unobserved = split_observed_vs_unobserved(grid, indices)

        assert observed | unobserved == set(indices)
        assert observed.isdisjoint(unobserved)
