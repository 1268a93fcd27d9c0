import numpy as np
import pytest

from cli.ensenso_cli import build_dispatcher
from ensenso_cam.constants import CMD_CAPTURE, CMD_COLLECT_PATTERN
from fake_runtime import FakeRuntime, VAL_MONOCULAR, VAL_STEREO
from utils.config import Config
from utils.io import load_pose_json, read_image


@pytest.fixture(autouse=True)
def cli_config(tmp_path):
    Config._data = {
        "ensenso": {
            "timeout_ms": 1000,
            "num_patterns": 2,
            "output_dir": str(tmp_path / "default_out"),
            "calib_output": str(tmp_path / "pose.json"),
        }
    }
    yield
    Config._data = None


def test_capture_saves_files(tmp_path) -> None:
    runtime = FakeRuntime({"1234": VAL_STEREO})
    build_dispatcher(lambda: runtime).run(
        ["capture", "--output-dir", str(tmp_path), "--roi", "0", "0", "3", "2"],
        track_exceptions=False,
    )
    assert read_image(tmp_path / "intensity.png").shape == (4, 6, 3)
    assert np.load(tmp_path / "points.npy").shape == (4, 6, 3)
    assert (tmp_path / "cloud.ply").exists()
    assert runtime.open_devices == []
    assert not runtime.is_open


def test_capture_failure_exits(tmp_path) -> None:
    runtime = FakeRuntime()
    runtime.retrieved = {"1234": False}
    with pytest.raises(SystemExit):
        build_dispatcher(lambda: runtime).run(
            ["capture", "--output-dir", str(tmp_path)], track_exceptions=False
        )
    assert not (tmp_path / "intensity.png").exists()


def test_calibrate_writes_pose(tmp_path) -> None:
    runtime = FakeRuntime(
        pattern_pose={
            "Rotation": {"Angle": 0.0, "Axis": [0.0, 0.0, 1.0]},
            "Translation": [10.0, 20.0, 30.0],
        }
    )
    build_dispatcher(lambda: runtime).run(["calibrate"], track_exceptions=False)
    pose = load_pose_json(tmp_path / "pose.json")
    assert np.allclose(pose[:3, 3], [0.01, 0.02, 0.03])
    assert runtime.count(CMD_COLLECT_PATTERN) == 2


def test_devices_lists_without_opening() -> None:
    runtime = FakeRuntime({"1234": VAL_STEREO, "4103": VAL_MONOCULAR})
    build_dispatcher(lambda: runtime).run(["devices"], track_exceptions=False)
    assert runtime.executed == []
    assert not runtime.is_open


def test_overlay_flag(tmp_path) -> None:
    runtime = FakeRuntime({"1234": VAL_STEREO, "4103": VAL_MONOCULAR})
    build_dispatcher(lambda: runtime).run(
        ["capture", "--overlay", "--output-dir", str(tmp_path)], track_exceptions=False
    )
    assert read_image(tmp_path / "intensity.png").shape == (4, 6, 3)


def test_capture_without_valid_depth_skips_cloud(tmp_path) -> None:
    runtime = FakeRuntime(point_map=np.full((4, 6, 3), np.nan, np.float32))
    build_dispatcher(lambda: runtime).run(
        ["capture", "--output-dir", str(tmp_path)], track_exceptions=False
    )
    assert (tmp_path / "intensity.png").exists()
    assert np.isnan(np.load(tmp_path / "points.npy")).all()
    assert not (tmp_path / "cloud.ply").exists()
    assert not runtime.is_open


def test_calibrate_zero_patterns_is_rejected(tmp_path) -> None:
    runtime = FakeRuntime()
    with pytest.raises(ValueError):
        build_dispatcher(lambda: runtime).run(
            ["calibrate", "--patterns", "0"], track_exceptions=False
        )
    assert runtime.count(CMD_COLLECT_PATTERN) == 0
    assert not (tmp_path / "pose.json").exists()
    assert not runtime.is_open


def test_explicit_zero_timeout_is_used(tmp_path) -> None:
    runtime = FakeRuntime()
    build_dispatcher(lambda: runtime).run(
        ["capture", "--timeout", "0", "--output-dir", str(tmp_path)],
        track_exceptions=False,
    )
    params = [p for c, p in runtime.executed if c == CMD_CAPTURE]
    assert params[-1]["Timeout"] == 0
