"""Ensenso stereo camera driver on top of the NxLib tree API."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Sequence, Tuple, cast

import numpy as np

from utils.error_tracker import (
    CameraCommandError,
    CameraConfigurationError,
    CameraError,
    CameraParameterError,
    ErrorTracker,
)
from utils.io import read_text
from utils.logger import Logger, LoggerType
from utils.settings import MM_TO_M, camera as CAMCFG

from .camera_base import CameraBase
from .constants import (
    CMD_CAPTURE,
    CMD_CLOSE,
    CMD_COLLECT_PATTERN,
    CMD_COMPUTE_DISPARITY_MAP,
    CMD_COMPUTE_POINT_MAP,
    CMD_DISCARD_PATTERNS,
    CMD_ESTIMATE_PATTERN_POSE,
    CMD_OPEN,
    CMD_RETRIEVE,
    CMD_TRIGGER,
    ITM_AREA_OF_INTEREST,
    ITM_BY_SERIAL_NO,
    ITM_CAMERAS,
    ITM_CAPTURE,
    ITM_DECODE_DATA,
    ITM_DISPARITY_MAP,
    ITM_FRONT_LIGHT,
    ITM_IMAGES,
    ITM_LEFT,
    ITM_LEFT_TOP,
    ITM_MODEL_NAME,
    ITM_PARAMETERS,
    ITM_PATTERN_POSE,
    ITM_PATTERNS,
    ITM_POINT_MAP,
    ITM_PROJECTOR,
    ITM_RAW,
    ITM_RETRIEVED,
    ITM_RIGHT_BOTTOM,
    ITM_SERIAL_NUMBER,
    ITM_TIMEOUT,
    ITM_TRIGGERED,
    ITM_TYPE,
    ITM_USE_DISPARITY_MAP_AREA_OF_INTEREST,
    VAL_MONOCULAR,
    VAL_STEREO,
)
from .converters import (
    gray_to_bgr,
    pattern_pose_to_transform,
    point_map_to_grid,
    rgb_to_bgr,
)
from .runtime import Runtime, run_command
from .tree import TreeNode, get_value, set_value


class CaptureTarget(Enum):
    """Which of the connected devices a trigger/retrieve addresses."""

    STEREO = "stereo"
    OVERLAY = "overlay"
    BOTH = "both"

    @property
    def stereo(self) -> bool:
        return self in (CaptureTarget.STEREO, CaptureTarget.BOTH)

    @property
    def overlay(self) -> bool:
        return self in (CaptureTarget.OVERLAY, CaptureTarget.BOTH)


@dataclass(frozen=True)
class Rect:
    """Pixel rectangle; ``br`` is exclusive like ``cv::Rect``."""

    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0

    @property
    def tl(self) -> Tuple[int, int]:
        return self.x, self.y

    @property
    def br(self) -> Tuple[int, int]:
        return self.x + self.width, self.y + self.height

    @property
    def area(self) -> int:
        return self.width * self.height

    @classmethod
    def from_sequence(cls, values: Sequence[int]) -> "Rect":
        """Build from ``(x, y, width, height)``."""
        x, y, w, h = (int(v) for v in values)
        return cls(x, y, w, h)


@dataclass(frozen=True)
class DeviceInfo:
    """Entry of ``/Cameras/BySerialNo``."""

    serial: str
    type: str
    model: str | None = None


def list_devices(runtime: Runtime) -> List[DeviceInfo]:
    """Enumerate cameras known to the runtime without opening them."""
    cams = runtime.root[ITM_CAMERAS][ITM_BY_SERIAL_NO]
    devices = []
    for i in range(cams.count()):
        node = cams[i]
        model = node[ITM_MODEL_NAME]
        devices.append(
            DeviceInfo(
                serial=get_value(node[ITM_SERIAL_NUMBER], str),
                type=get_value(node[ITM_TYPE], str),
                model=get_value(model, str) if model.exists() else None,
            )
        )
    return devices


class EnsensoCamera(CameraBase):
    """Ensenso stereo camera with an optional monocular overlay camera.

    Exactly one stereo device must be connected. With ``require_overlay``
    the first monocular device is opened as well and used as the intensity
    source. Only one instance may be connected per process because the
    runtime session is process wide.

    Usage::

        with EnsensoCamera(require_overlay=True) as cam:
            image = cam.load_intensity()
            grid = cam.load_point_cloud()
    """

    def __init__(
        self,
        runtime: Runtime | None = None,
        require_overlay: bool | None = None,
        timeout_ms: int | None = None,
        logger: LoggerType | None = None,
    ) -> None:
        """Create an unconnected camera.

        Parameters
        ----------
        runtime:
            Vendor session to use. Defaults to a new
            :class:`~ensenso_cam.nxlib_backend.NxLibRuntime`.
        require_overlay:
            Also open the first monocular device found. ``None`` uses
            :data:`utils.settings.camera`.
        timeout_ms:
            Timeout for capture/retrieve commands.
        logger:
            Logger to use for all messages.
        """
        if runtime is None:
            from .nxlib_backend import NxLibRuntime

            runtime = NxLibRuntime()
        self.runtime = runtime
        self.require_overlay = (
            CAMCFG.require_overlay if require_overlay is None else require_overlay
        )
        self.timeout_ms = CAMCFG.timeout_ms if timeout_ms is None else timeout_ms
        self.logger = logger or Logger.get_logger("ensenso.camera")
        self.stereo: TreeNode | None = None
        self.overlay: TreeNode | None = None
        self._serial: str | None = None
        self._overlay_serial: str | None = None
        self._opened: List[str] = []
        self.started = False

    # -- lifecycle ---------------------------------------------------------

    def start(self) -> None:
        """Initialize the runtime and open the stereo (and overlay) device.

        Anything opened before a failure is closed again before the error
        propagates.
        """
        if self.started:
            return
        try:
            self.runtime.open()
            stereo, monocular = self._select_devices()
            self._open_device(stereo.serial)
            self._serial = stereo.serial
            self.stereo = self._device_node(stereo.serial)
            if self.require_overlay:
                if monocular:
                    self._open_device(monocular.serial)
                    self._overlay_serial = monocular.serial
                    self.overlay = self._device_node(monocular.serial)
                else:
                    self.logger.warning(
                        "No monocular overlay camera found, using stereo images"
                    )
        except Exception as e:
            self.logger.error(f"Failed to connect Ensenso camera: {e}")
            self._release()
            raise
        self.started = True
        ErrorTracker.register_cleanup(self.stop)
        self.logger.info(
            f"Connected stereo SN:{self._serial}"
            + (f" overlay SN:{self._overlay_serial}" if self.found_overlay else "")
        )

    def stop(self) -> None:
        """Close all devices and finalize the runtime. Never raises."""
        was_started = self.started
        self._release()
        ErrorTracker.unregister_cleanup(self.stop)
        if was_started:
            self.logger.info("Ensenso camera closed")

    close = stop

    def _release(self) -> None:
        if self._opened and self.runtime.is_open:
            try:
                run_command(self.runtime, CMD_CLOSE)
            except Exception as e:
                self.logger.error(f"Closing devices {self._opened} failed: {e}")
        self._opened.clear()
        try:
            self.runtime.close()
        except Exception as e:
            self.logger.error(f"Closing runtime failed: {e}")
        self.stereo = None
        self.overlay = None
        self._serial = None
        self._overlay_serial = None
        self.started = False

    def _select_devices(self) -> Tuple[DeviceInfo, DeviceInfo | None]:
        devices = list_devices(self.runtime)
        self.logger.debug(f"Enumerated devices: {devices}")
        stereo = [d for d in devices if d.type == VAL_STEREO]
        monocular = [d for d in devices if d.type == VAL_MONOCULAR]
        if len(stereo) != 1:
            raise CameraConfigurationError(
                "Please connect a single stereo camera to your computer "
                f"(found {len(stereo)})."
            )
        return stereo[0], (monocular[0] if monocular else None)

    def _device_node(self, serial: str) -> TreeNode:
        return self.runtime.root[ITM_CAMERAS][ITM_BY_SERIAL_NO][serial]

    def _open_device(self, serial: str) -> None:
        run_command(self.runtime, CMD_OPEN, {ITM_CAMERAS: serial})
        self._opened.append(serial)
        self.logger.debug(f"Opened device {serial}")

    def _require_connected(self) -> TreeNode:
        if not self.started or self.stereo is None:
            raise CameraError("Ensenso camera is not connected")
        return self.stereo

    # -- properties --------------------------------------------------------

    @property
    def found_overlay(self) -> bool:
        return self.overlay is not None

    @property
    def serial_number(self) -> str:
        self._require_connected()
        return cast(str, self._serial)

    @property
    def overlay_serial_number(self) -> str | None:
        return self._overlay_serial

    # -- capture -----------------------------------------------------------

    def _serials_for(self, target: CaptureTarget) -> List[str]:
        serials = []
        if target.stereo:
            serials.append(self.serial_number)
        if target.overlay and self._overlay_serial is not None:
            serials.append(self._overlay_serial)
        if not serials:
            raise CameraError(f"No connected device for capture target {target.value}")
        return serials

    def _all_flagged(self, result: TreeNode, serials: List[str], flag: str) -> bool:
        for serial in serials:
            if not get_value(result[serial][flag], bool):
                self.logger.warning(f"Device {serial} reported {flag}=false")
                return False
        return True

    def trigger(self, target: CaptureTarget = CaptureTarget.BOTH) -> bool:
        """Trigger the devices named by ``target``.

        Returns ``False`` if a requested device was not triggered; vendor
        errors raise :class:`CameraCommandError`.
        """
        self._require_connected()
        serials = self._serials_for(target)
        cmd = self.runtime.command(CMD_TRIGGER)
        set_value(cmd.parameters[ITM_CAMERAS], serials)
        cmd.execute()
        return self._all_flagged(cmd.result, serials, ITM_TRIGGERED)

    def retrieve(
        self,
        trigger: bool = True,
        timeout_ms: int | None = None,
        target: CaptureTarget = CaptureTarget.STEREO,
    ) -> bool:
        """Capture (``trigger=True``) or retrieve already triggered images.

        Returns ``False`` if a requested device did not deliver images
        within the timeout.
        """
        self._require_connected()
        serials = self._serials_for(target)
        timeout = self.timeout_ms if timeout_ms is None else timeout_ms
        cmd = self.runtime.command(CMD_CAPTURE if trigger else CMD_RETRIEVE)
        set_value(cmd.parameters[ITM_TIMEOUT], int(timeout))
        set_value(cmd.parameters[ITM_CAMERAS], serials)
        cmd.execute()
        return self._all_flagged(cmd.result, serials, ITM_RETRIEVED)

    # -- calibration -------------------------------------------------------

    def calibrate(self, num_patterns: int | None = None) -> np.ndarray:
        """Estimate the calibration pattern pose from ``num_patterns`` views.

        Each view is captured with the front light on and the projector
        off. Returns a 4x4 transform with translation in meters.
        """
        stereo = self._require_connected()
        n = CAMCFG.num_patterns if num_patterns is None else num_patterns
        if n < 1:
            raise ValueError("num_patterns must be >= 1")

        run_command(self.runtime, CMD_DISCARD_PATTERNS)
        capture = stereo[ITM_PARAMETERS][ITM_CAPTURE]
        for i in Logger.progress(range(n), desc="Collecting patterns", total=n):
            set_value(capture[ITM_PROJECTOR], False)
            set_value(capture[ITM_FRONT_LIGHT], True)
            try:
                if not self.retrieve(True, self.timeout_ms, CaptureTarget.STEREO):
                    self.logger.warning(f"Pattern view {i} was not captured")
            finally:
                set_value(capture[ITM_FRONT_LIGHT], False)
                set_value(capture[ITM_PROJECTOR], True)
            run_command(
                self.runtime,
                CMD_COLLECT_PATTERN,
                {ITM_CAMERAS: self.serial_number, ITM_DECODE_DATA: True},
            )

        cmd = run_command(self.runtime, CMD_ESTIMATE_PATTERN_POSE)
        pose = pattern_pose_to_transform(cmd.result[ITM_PATTERNS][0][ITM_PATTERN_POSE])
        pose[:3, 3] *= MM_TO_M
        self.logger.info(f"Pattern pose t={pose[:3, 3].tolist()} m")
        return pose

    # -- buffers -----------------------------------------------------------

    def _intensity_node(self) -> TreeNode:
        stereo = self._require_connected()
        if self.overlay is not None:
            return self.overlay[ITM_IMAGES][ITM_RAW]
        return stereo[ITM_IMAGES][ITM_RAW][ITM_LEFT]

    def get_intensity_size(self) -> Tuple[int, int]:
        """``(width, height)`` of the intensity source buffer."""
        info = self._intensity_node().binary_info()
        return info.width, info.height

    def get_point_cloud_size(self) -> Tuple[int, int]:
        """``(width, height)`` of the point map buffer."""
        info = self._require_connected()[ITM_IMAGES][ITM_POINT_MAP].binary_info()
        return info.width, info.height

    def load_intensity(self, capture: bool = True) -> np.ndarray:
        """Return a BGR intensity image, optionally capturing first."""
        self._require_connected()
        if capture:
            target = CaptureTarget.OVERLAY if self.found_overlay else CaptureTarget.STEREO
            self.retrieve(True, self.timeout_ms, target)
        data = self._intensity_node().binary_data()
        if self.found_overlay:
            return rgb_to_bgr(data)
        return gray_to_bgr(data)

    def load_parameters(self, parameters_file: str | Path) -> None:
        """Apply a JSON parameter file to the stereo camera's parameters."""
        params = self._require_connected()[ITM_PARAMETERS]
        try:
            text = read_text(parameters_file)
        except OSError as e:
            raise CameraParameterError(
                params.path, f"cannot read {parameters_file}: {e}"
            ) from e
        try:
            json.loads(text)
        except ValueError as e:
            raise CameraParameterError(
                params.path, f"malformed JSON in {parameters_file}: {e}"
            ) from e
        try:
            params.set_json(text, True)
        except CameraCommandError as e:
            raise CameraParameterError(params.path, e.message, e.code) from e
        self.logger.info(f"Loaded parameters from {parameters_file}")

    def load_point_cloud(self, roi: Rect | None = None, capture: bool = True) -> np.ndarray:
        """Compute the point map and return it as a ``(H, W, 3)`` grid in meters."""
        stereo = self._require_connected()
        if capture:
            self.retrieve()
        self.set_region_of_interest(roi or Rect())
        run_command(self.runtime, CMD_COMPUTE_DISPARITY_MAP)
        run_command(self.runtime, CMD_COMPUTE_POINT_MAP)
        return point_map_to_grid(stereo[ITM_IMAGES][ITM_POINT_MAP].binary_data())

    def set_region_of_interest(self, roi: Rect) -> None:
        """Restrict disparity computation to ``roi``; zero area disables it."""
        params = self._require_connected()[ITM_PARAMETERS]
        use_aoi = params[ITM_CAPTURE][ITM_USE_DISPARITY_MAP_AREA_OF_INTEREST]
        aoi = params[ITM_DISPARITY_MAP][ITM_AREA_OF_INTEREST]
        if roi.area == 0:
            set_value(use_aoi, False)
            if aoi.exists():
                aoi.erase()
            return
        set_value(use_aoi, True)
        set_value(aoi[ITM_LEFT_TOP], list(roi.tl))
        set_value(aoi[ITM_RIGHT_BOTTOM], list(roi.br))

    def get_frames(
        self, capture: bool = True, roi: Rect | None = None
    ) -> Tuple[np.ndarray | None, np.ndarray | None]:
        """Capture once and return ``(intensity, point_grid)``."""
        self._require_connected()
        if capture:
            target = CaptureTarget.BOTH if self.found_overlay else CaptureTarget.STEREO
            if not self.retrieve(True, self.timeout_ms, target):
                return None, None
        return self.load_intensity(capture=False), self.load_point_cloud(roi, capture=False)
