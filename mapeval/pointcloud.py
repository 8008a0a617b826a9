"""
Conversion of voxel index sets into coloured point clouds.

One point per voxel, placed at the voxel centre.
"""

from typing import Iterable, NamedTuple, Sequence

import numpy as np

from mapeval.index import center_points_from_indices, index_array


class Color(NamedTuple):
    r: int
    g: int
    b: int
    a: int = 255


RED = Color(255, 0, 0)
GREEN = Color(0, 255, 0)
YELLOW = Color(255, 255, 0)


def create_point_cloud_from_indices(
    indices: Iterable[Sequence[int]], color: Color, voxel_size: float = 0.08
) -> np.ndarray:
    """
    Build a coloured point cloud from voxel indices.

    Args:
        indices: Global voxel indices
        color: Colour applied to every point
        voxel_size: Edge length of one voxel

    Returns:
        (N, 6) float64 array of ``x, y, z, r, g, b`` rows, ordered by index
    """
    points = center_points_from_indices(index_array(indices), voxel_size)
    colors = np.tile(np.asarray(color[:3], dtype=np.float64), (len(points), 1))
    return np.hstack([points, colors])
