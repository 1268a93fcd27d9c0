"""Abstract camera interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Tuple

import numpy as np


class CameraBase(ABC):
    """Minimal camera control API."""

    @abstractmethod
    def start(self) -> None:
        """Connect to the device."""

    @abstractmethod
    def stop(self) -> None:
        """Release the device. Must not raise."""

    @abstractmethod
    def get_frames(
        self, capture: bool = True
    ) -> Tuple[np.ndarray | None, np.ndarray | None]:
        """Return intensity image and XYZ point grid."""

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()
