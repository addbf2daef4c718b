# vision/pointcloud/generator.py
"""Point cloud utilities built around Open3D."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import open3d as o3d


class PointCloudGenerator:
    """Utility class for converting and storing XYZ point clouds."""

    @staticmethod
    def as_xyz(points: np.ndarray) -> np.ndarray:
        """Return ``points`` as a contiguous (N, 3) float32 array, order kept."""
        pts = np.asarray(points, dtype=np.float32)
        if pts.ndim != 2 or pts.shape[1] != 3:
            pts = pts.reshape(-1, 3)
        return np.ascontiguousarray(pts)

    @staticmethod
    def finite(points: np.ndarray) -> np.ndarray:
        """Drop rows the vendor marked invalid with NaN."""
        return points[np.isfinite(points).all(axis=1)]

    @staticmethod
    def to_o3d(points: np.ndarray) -> o3d.geometry.PointCloud:
        """Wrap an (N, 3) array in an Open3D point cloud."""
        pcd = o3d.geometry.PointCloud()
        pcd.points = o3d.utility.Vector3dVector(points.astype(np.float64))
        return pcd

    @staticmethod
    def save_ply(filename: str | Path, points: np.ndarray) -> None:
        """
        Save a point cloud to a PLY file using Open3D.

        Args:
            filename: Output path.
            points: (N, 3) array.
        """
        pcd = PointCloudGenerator.to_o3d(PointCloudGenerator.finite(points))
        if not o3d.io.write_point_cloud(str(filename), pcd):
            raise OSError(f"Failed to write point cloud: {filename}")

    @staticmethod
    def load_ply(filename: str | Path) -> np.ndarray:
        """Load a point cloud from a PLY file as an (N, 3) float32 array."""
        pcd = o3d.io.read_point_cloud(str(filename))
        return np.asarray(pcd.points, dtype=np.float32)
