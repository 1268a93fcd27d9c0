"""File I/O helpers for captures, parameter files and calibration data."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import cv2
import numpy as np


def read_text(path: str | Path) -> str:
    """Return the full contents of a text file."""
    with open(path, "r") as f:
        return f.read()


def read_image(path: str | Path) -> np.ndarray | None:
    """Return an image from ``path`` or ``None`` if loading fails."""
    return cv2.imread(str(path))


def write_image(path: str | Path, img: np.ndarray) -> None:
    """Save an image to disk, creating the parent directory."""
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    if not cv2.imwrite(str(path), img):
        raise IOError(f"Failed to write image {path}")


def load_json(path: str | Path) -> Any:
    """Load JSON data from ``path``."""
    with open(path, "r") as f:
        return json.load(f)


def save_json(path: str | Path, data: Any) -> None:
    """Write data as JSON to ``path``."""
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(data, f, indent=2)


def save_npy(path: str | Path, arr: np.ndarray) -> None:
    """Save an array to an ``.npy`` file."""
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    np.save(path, arr)


def save_pose_json(path: str | Path, pose: np.ndarray) -> None:
    """Store a 4x4 transform as ``{"pose": [[...], ...]}``."""
    save_json(path, {"pose": np.asarray(pose, dtype=float).tolist()})


def load_pose_json(path: str | Path) -> np.ndarray:
    """Inverse of :func:`save_pose_json`."""
    return np.asarray(load_json(path)["pose"], dtype=np.float64)
