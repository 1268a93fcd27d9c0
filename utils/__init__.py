"""Shared helper modules used across the project.

The :mod:`utils` package contains lightweight helpers for logging, CLI
dispatching, configuration, error types and simple file I/O used by the
camera adapter and its command line tools.
"""

from .logger import Logger, LoggerType
from .settings import (
    CLOUD_EXT,
    IMAGE_EXT,
    MM_TO_M,
    POINTS_EXT,
    EnsensoCfg,
    camera,
    logging,
    paths,
)
from .error_tracker import (
    CameraCommandError,
    CameraConfigurationError,
    CameraConnectionError,
    CameraError,
    CameraParameterError,
    ErrorTracker,
)
from .io import (
    load_json,
    load_pose_json,
    read_image,
    read_text,
    save_json,
    save_npy,
    save_pose_json,
    write_image,
)
from .math_utils import (
    axis_angle_to_matrix,
    make_transform,
)

__all__ = [
    "Logger",
    "LoggerType",
    "CLOUD_EXT",
    "IMAGE_EXT",
    "MM_TO_M",
    "POINTS_EXT",
    "EnsensoCfg",
    "camera",
    "logging",
    "paths",
    "CameraCommandError",
    "CameraConfigurationError",
    "CameraConnectionError",
    "CameraError",
    "CameraParameterError",
    "ErrorTracker",
    "load_json",
    "load_pose_json",
    "read_image",
    "read_text",
    "save_json",
    "save_npy",
    "save_pose_json",
    "write_image",
    "axis_angle_to_matrix",
    "make_transform",
]
