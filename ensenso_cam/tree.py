"""Typed access to the hierarchical NxLib property tree.

The adapter never talks to the vendor bindings directly. It walks
:class:`TreeNode` objects and reads/writes values through
:func:`get_value` and :func:`set_value`, which add type checking and turn
every failure into :class:`~utils.error_tracker.CameraCommandError`
carrying the offending item path.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, List, Type, TypeVar, Union

import numpy as np

from utils.error_tracker import CameraCommandError

Key = Union[str, int]
T = TypeVar("T")


@dataclass(frozen=True)
class BinaryInfo:
    """Shape description of a binary tree item (image or point map)."""

    width: int
    height: int
    channels: int
    bytes_per_element: int
    is_float: bool


class TreeNode(ABC):
    """Minimal view of one item in the vendor tree."""

    @property
    @abstractmethod
    def path(self) -> str:
        """Slash separated path of this item, e.g. ``/Cameras/BySerialNo``."""

    @abstractmethod
    def __getitem__(self, key: Key) -> "TreeNode":
        """Return the child named ``key`` (or at index ``key``)."""

    @abstractmethod
    def exists(self) -> bool:
        """Return ``True`` if the item is present in the tree."""

    @abstractmethod
    def count(self) -> int:
        """Number of children (object members or array elements)."""

    @abstractmethod
    def value(self) -> Any:
        """Return the scalar value stored at this item."""

    @abstractmethod
    def set(self, value: Any) -> None:
        """Store a scalar value, creating the item if needed."""

    @abstractmethod
    def erase(self) -> None:
        """Remove the item and its subtree."""

    @abstractmethod
    def set_json(self, text: str, only_writable: bool = True) -> None:
        """Merge a JSON document into the subtree rooted here."""

    @abstractmethod
    def binary_info(self) -> BinaryInfo:
        """Dimensions of the binary buffer stored here."""

    @abstractmethod
    def binary_data(self) -> np.ndarray:
        """Copy of the binary buffer as ``(height, width, channels)``."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.path!r})"


def get_value(item: TreeNode, type_: Type[T]) -> T:
    """Read ``item`` and check it holds a ``type_`` value.

    Integers are accepted where floats are requested; booleans are never
    accepted as numbers.
    """
    value = item.value()
    if type_ is float and isinstance(value, int) and not isinstance(value, bool):
        return float(value)  # type: ignore[return-value]
    if type_ is int and isinstance(value, bool):
        raise CameraCommandError(item.path, f"expected int, got {value!r}")
    if not isinstance(value, type_):
        raise CameraCommandError(
            item.path, f"expected {type_.__name__}, got {type(value).__name__}"
        )
    return value


def get_list(item: TreeNode, type_: Type[T]) -> List[T]:
    """Read an array item as a list of ``type_`` values."""
    return [get_value(item[i], type_) for i in range(item.count())]


def set_value(item: TreeNode, value: Any) -> None:
    """Write a scalar (or a list of scalars) to ``item``."""
    if isinstance(value, (list, tuple)):
        for i, element in enumerate(value):
            set_value(item[i], element)
        return
    if isinstance(value, np.generic):
        value = value.item()
    if not isinstance(value, (bool, int, float, str)):
        raise CameraCommandError(
            item.path, f"unsupported value type {type(value).__name__}"
        )
    item.set(value)
