"""Ensenso stereo camera adapter.

The package exposes :class:`EnsensoCamera`, a driver that sequences NxLib
commands for capture, calibration and point map retrieval, together with the
tree/runtime interfaces it is written against. The NxLib bindings are only
imported when a :class:`NxLibRuntime` is opened, so the rest of the package
can be used with any other :class:`Runtime` implementation.
"""

from .camera import CaptureTarget, DeviceInfo, EnsensoCamera, Rect, list_devices
from .camera_base import CameraBase
from .converters import (
    grid_to_point_cloud,
    gray_to_bgr,
    pattern_pose_to_transform,
    point_map_to_grid,
    rgb_to_bgr,
    save_point_cloud,
)
from .nxlib_backend import NxLibRuntime
from .runtime import Command, Runtime, run_command
from .tree import BinaryInfo, TreeNode, get_list, get_value, set_value

__all__ = [
    "BinaryInfo",
    "CameraBase",
    "CaptureTarget",
    "Command",
    "DeviceInfo",
    "EnsensoCamera",
    "NxLibRuntime",
    "Rect",
    "Runtime",
    "TreeNode",
    "get_list",
    "get_value",
    "grid_to_point_cloud",
    "gray_to_bgr",
    "list_devices",
    "pattern_pose_to_transform",
    "point_map_to_grid",
    "rgb_to_bgr",
    "run_command",
    "save_point_cloud",
    "set_value",
]
