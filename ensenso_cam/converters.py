# ensenso_cam/converters.py
"""Conversions from NxLib buffers and tree items to numpy/OpenCV/Open3D data."""

from __future__ import annotations

from pathlib import Path

import cv2
import numpy as np
import open3d as o3d

from utils.error_tracker import CameraCommandError
from utils.math_utils import axis_angle_to_matrix, make_transform
from utils.settings import MM_TO_M

from .constants import ITM_ANGLE, ITM_AXIS, ITM_ROTATION, ITM_TRANSLATION
from .tree import TreeNode, get_list, get_value


def _as_hwc(data: np.ndarray) -> np.ndarray:
    """Return ``data`` as a contiguous ``(H, W, C)`` array."""
    data = np.ascontiguousarray(data)
    if data.ndim == 2:
        data = data[:, :, np.newaxis]
    if data.ndim != 3:
        raise ValueError(f"Expected a 2D or 3D buffer, got shape {data.shape}")
    return data


def rgb_to_bgr(data: np.ndarray) -> np.ndarray:
    """Convert an overlay camera RGB buffer to a BGR image."""
    data = _as_hwc(data)
    if data.shape[2] != 3:
        raise ValueError(f"Expected 3 channels, got {data.shape[2]}")
    return cv2.cvtColor(data, cv2.COLOR_RGB2BGR)


def gray_to_bgr(data: np.ndarray) -> np.ndarray:
    """Broadcast a single channel raw stereo image to BGR."""
    data = _as_hwc(data)
    if data.shape[2] != 1:
        raise ValueError(f"Expected 1 channel, got {data.shape[2]}")
    return cv2.cvtColor(np.ascontiguousarray(data[:, :, 0]), cv2.COLOR_GRAY2BGR)


def point_map_to_grid(data: np.ndarray, scale: float = MM_TO_M) -> np.ndarray:
    """Convert a point map buffer (millimeters) to a float32 XYZ grid.

    The grid keeps the sensor layout ``(H, W, 3)``; pixels without depth
    stay NaN.
    """
    data = _as_hwc(data)
    if data.shape[2] != 3:
        raise ValueError(f"Point map must have 3 channels, got {data.shape[2]}")
    return (data.astype(np.float32) * np.float32(scale)).astype(np.float32)


def grid_to_point_cloud(
    grid: np.ndarray, colors: np.ndarray | None = None
) -> o3d.geometry.PointCloud:
    """Build an Open3D cloud from the finite points of ``grid``.

    ``colors`` is an optional BGR image with the same height and width.
    """
    points = grid.reshape(-1, 3)
    mask = np.isfinite(points).all(axis=1)
    pcd = o3d.geometry.PointCloud()
    pcd.points = o3d.utility.Vector3dVector(points[mask].astype(np.float64))
    if colors is not None:
        if colors.shape[:2] != grid.shape[:2]:
            raise ValueError(
                f"Color image {colors.shape[:2]} does not match grid {grid.shape[:2]}"
            )
        rgb = colors.reshape(-1, 3)[mask][:, ::-1] / 255.0
        pcd.colors = o3d.utility.Vector3dVector(rgb.astype(np.float64))
    return pcd


def save_point_cloud(
    path: str | Path, grid: np.ndarray, colors: np.ndarray | None = None
) -> int:
    """Write the finite points of ``grid`` as PLY; return the point count."""
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    pcd = grid_to_point_cloud(grid, colors)
    if not o3d.io.write_point_cloud(str(path), pcd):
        raise IOError(f"Failed to write point cloud {path}")
    return len(pcd.points)


def pattern_pose_to_transform(pose: TreeNode) -> np.ndarray:
    """Read a ``PatternPose`` item (axis-angle rotation) as a 4x4 transform.

    Translation is returned in the units stored in the tree.
    """
    rotation = pose[ITM_ROTATION]
    angle = get_value(rotation[ITM_ANGLE], float)
    axis = get_list(rotation[ITM_AXIS], float)
    translation = get_list(pose[ITM_TRANSLATION], float)
    if len(axis) != 3 or len(translation) != 3:
        raise CameraCommandError(pose.path, "malformed pattern pose")
    return make_transform(axis_angle_to_matrix(axis, angle), np.array(translation))
