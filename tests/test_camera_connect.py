import pytest

from ensenso_cam import EnsensoCamera
from ensenso_cam.constants import CMD_CLOSE, CMD_OPEN
from fake_runtime import FakeRuntime, VAL_MONOCULAR, VAL_STEREO
from utils.error_tracker import (
    CameraCommandError,
    CameraConfigurationError,
    CameraError,
    ErrorTracker,
)


def test_single_stereo_connects(stereo_runtime) -> None:
    cam = EnsensoCamera(runtime=stereo_runtime, require_overlay=False)
    cam.start()
    assert cam.started
    assert cam.serial_number == "1234"
    assert not cam.found_overlay
    assert stereo_runtime.open_devices == ["1234"]
    cam.stop()
    assert stereo_runtime.open_devices == []
    assert not stereo_runtime.is_open


@pytest.mark.parametrize(
    "devices",
    [
        {},
        {"4103": VAL_MONOCULAR},
        {"1234": VAL_STEREO, "5678": VAL_STEREO},
    ],
)
def test_stereo_count_policy(devices) -> None:
    runtime = FakeRuntime(devices)
    cam = EnsensoCamera(runtime=runtime, require_overlay=True)
    with pytest.raises(CameraConfigurationError):
        cam.start()
    assert not cam.started
    assert runtime.open_devices == []
    assert not runtime.is_open
    assert runtime.close_calls == 1


def test_overlay_opens_both(overlay_runtime) -> None:
    with EnsensoCamera(runtime=overlay_runtime, require_overlay=True) as cam:
        assert cam.found_overlay
        assert cam.overlay_serial_number == "4103"
        assert overlay_runtime.open_devices == ["1234", "4103"]
    assert overlay_runtime.open_devices == []
    assert overlay_runtime.count(CMD_CLOSE) == 1


def test_overlay_not_requested_is_ignored(overlay_runtime) -> None:
    with EnsensoCamera(runtime=overlay_runtime, require_overlay=False) as cam:
        assert not cam.found_overlay
        assert cam.overlay_serial_number is None
        assert overlay_runtime.open_devices == ["1234"]


def test_missing_overlay_falls_back_to_stereo(stereo_runtime) -> None:
    with EnsensoCamera(runtime=stereo_runtime, require_overlay=True) as cam:
        assert not cam.found_overlay
        assert stereo_runtime.count(CMD_OPEN) == 1


def test_failed_overlay_open_rolls_back(overlay_runtime) -> None:
    overlay_runtime.fail_open = {"4103"}
    cam = EnsensoCamera(runtime=overlay_runtime, require_overlay=True)
    with pytest.raises(CameraCommandError) as exc:
        cam.start()
    assert exc.value.code == 17
    assert overlay_runtime.open_devices == []
    assert not overlay_runtime.is_open
    cam.stop()
    assert cam.stop not in ErrorTracker._cleanup_funcs


def test_stop_never_raises() -> None:
    runtime = FakeRuntime()
    cam = EnsensoCamera(runtime=runtime)
    cam.stop()
    cam.start()
    runtime.fail_commands[CMD_CLOSE] = 5
    cam.stop()
    cam.stop()
    assert not runtime.is_open
    assert not cam.started


def test_cleanup_registered_while_connected(camera) -> None:
    assert camera.stop in ErrorTracker._cleanup_funcs
    camera.stop()
    assert camera.stop not in ErrorTracker._cleanup_funcs


def test_operations_require_connection(stereo_runtime) -> None:
    cam = EnsensoCamera(runtime=stereo_runtime)
    with pytest.raises(CameraError):
        cam.trigger()
    with pytest.raises(CameraError):
        cam.load_intensity()
    with pytest.raises(CameraError):
        _ = cam.serial_number


def test_start_twice_is_noop(camera, stereo_runtime) -> None:
    camera.start()
    assert stereo_runtime.count(CMD_OPEN) == 1
