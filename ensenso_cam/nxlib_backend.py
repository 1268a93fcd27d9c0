"""Runtime backed by the Ensenso ``nxlib`` Python bindings."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

import numpy as np

from utils.error_tracker import CameraCommandError, CameraConnectionError, CameraError
from utils.logger import Logger, LoggerType

from .runtime import Command, Runtime
from .tree import BinaryInfo, Key, TreeNode


class NxLibNode(TreeNode):
    """:class:`TreeNode` over an ``nxlib.NxLibItem``.

    Values are written through the parent item (``parent[key] = value``),
    which is how the bindings assign typed values.
    """

    def __init__(self, runtime: "NxLibRuntime", item: Any, parent: Any = None, key: Key | None = None):
        self._runtime = runtime
        self._item = item
        self._parent = parent
        self._key = key

    @property
    def path(self) -> str:
        return str(self._item.path)

    def __getitem__(self, key: Key) -> "NxLibNode":
        return NxLibNode(self._runtime, self._item[key], self._item, key)

    def exists(self) -> bool:
        with self._runtime.translate(self.path):
            return bool(self._item.exists())

    def count(self) -> int:
        with self._runtime.translate(self.path):
            return int(self._item.count())

    def value(self) -> Any:
        with self._runtime.translate(self.path):
            return self._item.value()

    def set(self, value: Any) -> None:
        if self._parent is None:
            raise CameraCommandError(self.path, "cannot assign to the tree root")
        with self._runtime.translate(self.path):
            self._parent[self._key] = value

    def erase(self) -> None:
        with self._runtime.translate(self.path):
            self._item.erase()

    def set_json(self, text: str, only_writable: bool = True) -> None:
        with self._runtime.translate(self.path):
            self._item.set_json(text, only_writable)

    def binary_info(self) -> BinaryInfo:
        with self._runtime.translate(self.path):
            width, height, channels, bpe, is_float, _ = self._item.get_binary_data_info()
        return BinaryInfo(int(width), int(height), int(channels), int(bpe), bool(is_float))

    def binary_data(self) -> np.ndarray:
        with self._runtime.translate(self.path):
            data = self._item.get_binary_data()
        return np.array(data, copy=True)


class NxLibCommandAdapter(Command):
    """:class:`Command` over ``nxlib.NxLibCommand``."""

    def __init__(self, runtime: "NxLibRuntime", name: str) -> None:
        super().__init__(name)
        self._runtime = runtime
        self._cmd = runtime.nx.NxLibCommand(name)

    @property
    def parameters(self) -> TreeNode:
        return NxLibNode(self._runtime, self._cmd.parameters())

    @property
    def result(self) -> TreeNode:
        return NxLibNode(self._runtime, self._cmd.result())

    def execute(self) -> None:
        with self._runtime.translate(self.name):
            self._cmd.execute()


class NxLibRuntime(Runtime):
    """NxLib session. The bindings are imported on :meth:`open`."""

    _active: "NxLibRuntime | None" = None

    def __init__(self, logger: LoggerType | None = None) -> None:
        self.logger = logger or Logger.get_logger("ensenso.nxlib")
        self.nx: Any = None
        self._api: Any = None
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    def open(self) -> None:
        if self._open:
            return
        if NxLibRuntime._active is not None:
            raise CameraError("Another NxLib runtime is already open in this process")
        try:
            import nxlib
            import nxlib.api as api
        except ImportError as e:
            raise CameraConnectionError(
                "The 'nxlib' package is required (pip install nxlib)"
            ) from e
        self.nx = nxlib
        self._api = api
        with self.translate("nxLibInitialize"):
            api.initialize()
        self._open = True
        NxLibRuntime._active = self
        self.logger.info("NxLib initialized")

    def close(self) -> None:
        if not self._open:
            return
        self._open = False
        if NxLibRuntime._active is self:
            NxLibRuntime._active = None
        try:
            self._api.finalize()
            self.logger.info("NxLib finalized")
        except Exception as e:
            self.logger.error(f"NxLib finalize failed: {e}")

    @property
    def root(self) -> TreeNode:
        self._require_open()
        return NxLibNode(self, self.nx.NxLibItem())

    def command(self, name: str) -> Command:
        self._require_open()
        return NxLibCommandAdapter(self, name)

    def _require_open(self) -> None:
        if not self._open:
            raise CameraError("NxLib runtime is not open")

    @contextmanager
    def translate(self, path: str) -> Iterator[None]:
        """Re-raise ``NxLibException`` as :class:`CameraCommandError`."""
        try:
            yield
        except self.nx.NxLibException as e:
            raise CameraCommandError(
                e.get_item_path() or path, e.get_error_text(), e.get_error_code()
            ) from e
