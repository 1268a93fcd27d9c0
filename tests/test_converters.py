import numpy as np
import open3d as o3d  # type: ignore
import pytest

from ensenso_cam import (
    gray_to_bgr,
    grid_to_point_cloud,
    pattern_pose_to_transform,
    point_map_to_grid,
    rgb_to_bgr,
    save_point_cloud,
)
from fake_runtime import FakeTree
from utils.error_tracker import CameraCommandError


def test_rgb_to_bgr_swaps_channels() -> None:
    rgb = np.zeros((2, 3, 3), np.uint8)
    rgb[..., 0] = 255
    bgr = rgb_to_bgr(rgb)
    assert np.all(bgr[..., 2] == 255)
    assert np.all(bgr[..., 0] == 0)
    with pytest.raises(ValueError):
        rgb_to_bgr(np.zeros((2, 3), np.uint8))


def test_gray_to_bgr_accepts_single_channel_buffers() -> None:
    gray = np.arange(6, dtype=np.uint8).reshape(2, 3, 1)
    bgr = gray_to_bgr(gray)
    assert bgr.shape == (2, 3, 3)
    assert np.array_equal(bgr[..., 1], gray[..., 0])


def test_point_map_to_grid_scales_and_keeps_nan() -> None:
    pm = np.array([[[1000.0, -2000.0, 500.0], [np.nan, np.nan, np.nan]]], np.float32)
    grid = point_map_to_grid(pm)
    assert grid.dtype == np.float32
    assert np.allclose(grid[0, 0], [1.0, -2.0, 0.5])
    assert np.isnan(grid[0, 1]).all()
    with pytest.raises(ValueError):
        point_map_to_grid(np.zeros((2, 2), np.float32))


def test_grid_to_point_cloud_drops_invalid_points() -> None:
    grid = np.zeros((2, 2, 3), np.float32)
    grid[0, 0] = np.nan
    colors = np.zeros((2, 2, 3), np.uint8)
    colors[..., 0] = 255  # blue in BGR
    pcd = grid_to_point_cloud(grid, colors)
    assert len(pcd.points) == 3
    assert np.allclose(np.asarray(pcd.colors), [[0.0, 0.0, 1.0]] * 3)
    with pytest.raises(ValueError):
        grid_to_point_cloud(grid, np.zeros((3, 3, 3), np.uint8))


def test_save_point_cloud(tmp_path) -> None:
    grid = np.random.rand(3, 4, 3).astype(np.float32)
    out = tmp_path / "clouds" / "cloud.ply"
    assert save_point_cloud(out, grid) == 12
    loaded = o3d.io.read_point_cloud(str(out))
    assert len(loaded.points) == 12


def test_pattern_pose_to_transform() -> None:
    node = FakeTree().node()["PatternPose"]
    node.set(
        {
            "Rotation": {"Angle": np.pi, "Axis": [1, 0, 0]},
            "Translation": [1, 2, 3],
        }
    )
    T = pattern_pose_to_transform(node)
    assert np.allclose(T[:3, 3], [1, 2, 3])
    assert np.allclose(T[:3, :3], np.diag([1.0, -1.0, -1.0]), atol=1e-9)


def test_pattern_pose_malformed() -> None:
    node = FakeTree().node()["PatternPose"]
    node.set({"Rotation": {"Angle": 0.0, "Axis": [0, 1]}, "Translation": [0, 0, 0]})
    with pytest.raises(CameraCommandError):
        pattern_pose_to_transform(node)
