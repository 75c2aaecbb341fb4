"""
Generic playlist document walker.

Loosely structured legacy documents are read by collecting values by key
name, regardless of how deeply they are nested. The walk is depth-first:
arrays are expanded in element order and objects in sorted key order.

Each recursive call builds its own accumulator and returns it; the caller
merges child results in traversal order. Repeatable keys (``file``,
``position``, ``take``) append, scalar keys (``base_path``, ``repeat``,
``volume``) are last-write-wins. ``skip`` is recognised but has no effect.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union

from mp3player.domain.exceptions import FormatError

TimeValue = Union[str, int, float]


@dataclass
class DocumentAccumulator:
    """Values collected from a generic document."""

    base_path: Optional[str] = None
    files: List[str] = field(default_factory=list)
    positions: List[TimeValue] = field(default_factory=list)
    takes: List[TimeValue] = field(default_factory=list)
    repeat: Optional[bool] = None
    volume: Optional[float] = None

    def merge(self, other: "DocumentAccumulator") -> "DocumentAccumulator":
        """Return a new accumulator with ``other`` appended after this one."""
        return DocumentAccumulator(
            base_path=other.base_path if other.base_path is not None else self.base_path,
            files=self.files + other.files,
            positions=self.positions + other.positions,
            takes=self.takes + other.takes,
            repeat=other.repeat if other.repeat is not None else self.repeat,
            volume=other.volume if other.volume is not None else self.volume,
        )

    @property
    def has_files(self) -> bool:
        return bool(self.files)


def _expect_string(key: str, value: Any) -> str:
    if not isinstance(value, str):
        raise FormatError(f"Expected string for '{key}', got {type(value).__name__}: {value!r}")
    return value


def _expect_time(key: str, value: Any) -> TimeValue:
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise FormatError(
            f"Expected time string or seconds for '{key}', got {type(value).__name__}: {value!r}"
        )
    return value


def _set_base_path(acc: DocumentAccumulator, value: Any) -> None:
    acc.base_path = _expect_string("base_path", value)


def _add_file(acc: DocumentAccumulator, value: Any) -> None:
    acc.files.append(_expect_string("file", value))


def _add_position(acc: DocumentAccumulator, value: Any) -> None:
    acc.positions.append(_expect_time("position", value))


def _add_take(acc: DocumentAccumulator, value: Any) -> None:
    acc.takes.append(_expect_time("take", value))


def _set_repeat(acc: DocumentAccumulator, value: Any) -> None:
    if not isinstance(value, bool):
        raise FormatError(f"Expected boolean for 'repeat', got {type(value).__name__}: {value!r}")
    acc.repeat = value


def _set_volume(acc: DocumentAccumulator, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise FormatError(f"Expected number for 'volume', got {type(value).__name__}: {value!r}")
    acc.volume = float(value)


def _ignore(acc: DocumentAccumulator, value: Any) -> None:
    # Reserved key, recognised so it never counts as unknown
    pass


KEY_HANDLERS: Dict[str, Callable[[DocumentAccumulator, Any], None]] = {
    "base_path": _set_base_path,
    "file": _add_file,
    "position": _add_position,
    "take": _add_take,
    "repeat": _set_repeat,
    "volume": _set_volume,
    "skip": _ignore,
}


def walk_document(value: Any) -> DocumentAccumulator:
    """
    Collect recognised keys from an arbitrary JSON value.

    Args:
        value: Parsed JSON (dict, list, str, number, bool or None)

    Returns:
        Accumulator holding everything found under this value

    Raises:
        FormatError: If a recognised key holds a value of the wrong type
    """
    acc = DocumentAccumulator()

    if isinstance(value, dict):
        for key in sorted(value):
            child = value[key]
            if isinstance(child, (dict, list)):
                acc = acc.merge(walk_document(child))
                continue
            if child is None:
                continue
            handler = KEY_HANDLERS.get(key)
            if handler is not None:
                handler(acc, child)
    elif isinstance(value, list):
        for item in value:
            acc = acc.merge(walk_document(item))

    # Scalars outside of an object carry no key and are skipped
    return acc
