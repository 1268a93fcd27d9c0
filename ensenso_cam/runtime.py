"""Runtime session and command interfaces.

A :class:`Runtime` is the explicit handle for the vendor library session.
NxLib keeps its state per process, so only one runtime may be open at a
time; :class:`~ensenso_cam.camera.EnsensoCamera` receives the runtime it
works with instead of reaching for hidden globals.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping

from utils.logger import Logger

from .tree import TreeNode, set_value

_logger = Logger.get_logger("ensenso.runtime")


class Command(ABC):
    """A vendor command: parameters in, execute, results out."""

    def __init__(self, name: str) -> None:
        self.name = name

    @property
    @abstractmethod
    def parameters(self) -> TreeNode:
        """Parameter subtree of the command."""

    @property
    @abstractmethod
    def result(self) -> TreeNode:
        """Result subtree, valid after :meth:`execute`."""

    @abstractmethod
    def execute(self) -> None:
        """Run the command and block until it finishes.

        Raises :class:`~utils.error_tracker.CameraCommandError` when the
        vendor reports a failure.
        """


class Runtime(ABC):
    """Process wide vendor session."""

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """``True`` between :meth:`open` and :meth:`close`."""

    @abstractmethod
    def open(self) -> None:
        """Initialize the vendor library."""

    @abstractmethod
    def close(self) -> None:
        """Finalize the vendor library. Safe to call when not open."""

    @property
    @abstractmethod
    def root(self) -> TreeNode:
        """Root item of the tree."""

    @abstractmethod
    def command(self, name: str) -> Command:
        """Create a fresh command object for ``name``."""


def run_command(
    runtime: Runtime, name: str, parameters: Mapping[str, Any] | None = None
) -> Command:
    """Create, parameterize and execute ``name``; return the finished command."""
    cmd = runtime.command(name)
    for key, value in (parameters or {}).items():
        set_value(cmd.parameters[key], value)
    _logger.debug(f"Executing {name} {dict(parameters or {})}")
    cmd.execute()
    return cmd
