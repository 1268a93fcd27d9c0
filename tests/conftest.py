import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))
sys.path.insert(0, str(Path(__file__).resolve().parent))

from ensenso_cam import EnsensoCamera  # noqa: E402
from fake_runtime import FakeRuntime, VAL_MONOCULAR, VAL_STEREO  # noqa: E402


@pytest.fixture
def stereo_runtime() -> FakeRuntime:
    left = np.arange(24, dtype=np.uint8).reshape(4, 6)
    return FakeRuntime({"1234": VAL_STEREO}, left_image=left)


@pytest.fixture
def overlay_runtime() -> FakeRuntime:
    color = np.zeros((4, 6, 3), np.uint8)
    color[..., 0] = 200  # red channel in RGB order
    color[..., 2] = 10
    return FakeRuntime({"1234": VAL_STEREO, "4103": VAL_MONOCULAR}, color_image=color)


@pytest.fixture
def camera(stereo_runtime):
    cam = EnsensoCamera(runtime=stereo_runtime, require_overlay=False)
    cam.start()
    yield cam
    cam.stop()


@pytest.fixture
def overlay_camera(overlay_runtime):
    cam = EnsensoCamera(runtime=overlay_runtime, require_overlay=True)
    cam.start()
    yield cam
    cam.stop()
