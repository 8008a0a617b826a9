"""
Map Evaluation Visualization Module

Publishes the comparison point clouds of an evaluation run: ASCII PLY files
that any point-cloud viewer can open, and a matplotlib 3D preview.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import matplotlib.pyplot as plt
import numpy as np
from plyfile import PlyData, PlyElement

from mapeval.evaluation import EvaluationResult
from mapeval.pointcloud import GREEN, RED, YELLOW, create_point_cloud_from_indices

logger = logging.getLogger(__name__)

PLY_VERTEX_DTYPE = np.dtype(
    [("x", "f4"), ("y", "f4"), ("z", "f4"), ("red", "u1"), ("green", "u1"), ("blue", "u1")]
)

# Topic name -> (result attribute, colour, legend label)
COMPARISON_CLOUDS = {
    "occupancy_pointcloud_diff": ("difference_gt", RED, "Missed occupancy"),
    "occupancy_pointcloud_inter": ("intersection_gt", GREEN, "Correct occupancy"),
    "false_positive_observations": ("difference_observed", YELLOW, "False positives"),
}


def write_ply(points: np.ndarray, output_path: Union[str, Path]) -> Path:
    """
    Write an (N, 6) ``x, y, z, r, g, b`` array as an ASCII PLY file.

    Args:
        points: Point cloud from :func:`create_point_cloud_from_indices`
        output_path: Destination file

    Returns:
        Path of the written file
    """
    output_path = Path(output_path)
    points = np.asarray(points, dtype=np.float64).reshape(-1, 6)

    vertices = np.empty(len(points), dtype=PLY_VERTEX_DTYPE)
    for axis, name in enumerate(("x", "y", "z")):
        vertices[name] = points[:, axis]
    for channel, name in enumerate(("red", "green", "blue")):
        vertices[name] = points[:, 3 + channel]

    PlyData([PlyElement.describe(vertices, "vertex")], text=True).write(str(output_path))
    return output_path


class PointCloudRenderer:
    """3D scatter renderer for coloured voxel point clouds."""

    def render_point_clouds(
        self,
        clouds: Dict[str, np.ndarray],
        output_path: Optional[Union[str, Path]] = None,
        title: str = "Map Comparison",
        figsize: Tuple[int, int] = (12, 10),
        view_angles: Tuple[float, float] = (30, 45),
    ) -> plt.Figure:
        """
        Render several point clouds into one 3D axis.

        Args:
            clouds: Legend label -> (N, 6) point cloud
            output_path: Optional path to save the rendered image
            title: Title for the plot
            figsize: Figure size tuple
            view_angles: Elevation and azimuth angles for 3D view

        Returns:
            matplotlib Figure object
        """
        fig = plt.figure(figsize=figsize)
        ax = fig.add_subplot(111, projection="3d")

        for label, points in clouds.items():
            if len(points) == 0:
                continue
            ax.scatter(
                points[:, 0],
                points[:, 1],
                points[:, 2],
                c=points[:, 3:6] / 255.0,
                s=10,
                label=f"{label} ({len(points)})",
            )

        ax.set_xlabel("X")
        ax.set_ylabel("Y")
        ax.set_zlabel("Z")
        ax.set_title(title)
        ax.view_init(elev=view_angles[0], azim=view_angles[1])
        if any(len(points) for points in clouds.values()):
            ax.legend(bbox_to_anchor=(1.05, 1), loc="upper left")

        if output_path:
            plt.savefig(output_path, bbox_inches="tight", dpi=150)
            logger.info(f"Saved point cloud render to {output_path}")

        return fig


class PointCloudPublisher:
    """Writes the comparison clouds of an evaluation run to an output directory."""

    def __init__(self, output_dir: Union[str, Path], render_preview: bool = True):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.render_preview = render_preview
        self.renderer = PointCloudRenderer()

    def publish(self, result: EvaluationResult, voxel_size: float) -> List[Path]:
        """
        Publish the missed, correct and false-positive voxel clouds.

        Args:
            result: Evaluation run to publish
            voxel_size: Voxel size of the evaluated grids

        Returns:
            Paths of all written files
        """
        written = []
        legend_clouds = {}
        for topic, (attribute, color, label) in COMPARISON_CLOUDS.items():
            points = create_point_cloud_from_indices(
                getattr(result, attribute), color, voxel_size=voxel_size
            )
            written.append(write_ply(points, self.output_dir / f"{topic}.ply"))
            legend_clouds[label] = points
            logger.debug(f"Published {len(points)} points on {topic}")

        if self.render_preview:
            preview_path = self.output_dir / "comparison.png"
            fig = self.renderer.render_point_clouds(legend_clouds, output_path=preview_path)
            plt.close(fig)
            written.append(preview_path)

        logger.info(f"Published {len(written)} files to {self.output_dir}")
        return written
