from __future__ import annotations
from typing import Sequence

import numpy as np
from scipy.spatial.transform import Rotation

__all__ = [
    "axis_angle_to_matrix",
    "make_transform",
]


def axis_angle_to_matrix(axis: Sequence[float], angle: float) -> np.ndarray:
    """Return a rotation matrix for ``angle`` radians around ``axis``."""
    axis = np.asarray(axis, dtype=np.float64)
    norm = np.linalg.norm(axis)
    if norm == 0.0 or angle == 0.0:
        return np.eye(3)
    return Rotation.from_rotvec(axis / norm * angle).as_matrix()


def make_transform(R: np.ndarray, t: np.ndarray) -> np.ndarray:
    """Build a homogeneous transform from ``R`` and ``t``."""
    T = np.eye(4)
    T[:3, :3] = R
    T[:3, 3] = np.asarray(t).flatten()
    return T
