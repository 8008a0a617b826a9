# Automatically add the repository root to sys.path for pytest discovery of mapeval/ and scripts/
import sys
from pathlib import Path

ROOT = Path(__file__).parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from mapeval.layer import VoxelGrid


def fill_box(grid, x_range, y_range, z_range=(0, 1), distance=0.0, weight=1.0):
    """Write every voxel in the half-open index box with the given TSDF values."""
    for x in range(*x_range):
        for y in range(*y_range):
            for z in range(*z_range):
                grid.set_voxel((x, y, z), distance=distance, weight=weight)


@pytest.fixture
def overlap_grids():
    """
    Two 8-voxel-per-side grids with voxel size 1.

    Ground truth is occupied over x in [4, 12), y in [3, 6), z = 0 (24 voxels,
    two blocks); the observed grid over x in [5, 8), y in [2, 4), z = 0
    (6 voxels). Three voxels overlap.
    """
    ground_truth = VoxelGrid(voxel_size=1.0, voxels_per_side=8)
    observed = VoxelGrid(voxel_size=1.0, voxels_per_side=8)
    fill_box(ground_truth, (4, 12), (3, 6))
    fill_box(observed, (5, 8), (2, 4))
    return ground_truth, observed


@pytest.fixture
def shell_grid():
    """Grid whose occupied voxels form a closed 5x5x5 shell centred on the origin."""
    grid = VoxelGrid(voxel_size=1.0, voxels_per_side=8)
    for x in range(-2, 3):
        for y in range(-2, 3):
            for z in range(-2, 3):
                if max(abs(x), abs(y), abs(z)) == 2:
                    grid.set_voxel((x, y, z), distance=0.0, weight=1.0)
    return grid


@pytest.fixture
def fill():
    """Expose :func:`fill_box` to tests."""
    return fill_box
