"""ModifierDiffer — compute a ``$set`` / ``$unset`` update from a desired document.

The diff is a snapshot of the supplied fields, not a comparison with the
stored document: nested mappings are flattened to dotted paths, ``None``
(and, by default, empty strings) become ``$unset`` entries.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass
class Modifier:
    """Partial update instruction.

    Attributes:
        set: Dotted path -> new value.
        unset: Dotted path -> ``""`` (the driver ignores the value).
    """

    set: dict[str, Any] = field(default_factory=dict)
    unset: dict[str, Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.set and not self.unset

    def to_update(self) -> dict[str, dict[str, Any]]:
        update: dict[str, dict[str, Any]] = {}
        if self.set:
            update["$set"] = dict(self.set)
        if self.unset:
            update["$unset"] = dict(self.unset)
        return update


def _flatten(value: Any, path: str, keep_arrays: bool, out: dict[str, Any]) -> None:
    if isinstance(value, Mapping) and value:
        for key, child in value.items():
            _flatten(child, f"{path}.{key}" if path else str(key), keep_arrays, out)
    elif isinstance(value, list) and value and not keep_arrays:
        for idx, child in enumerate(value):
            _flatten(child, f"{path}.{idx}", keep_arrays, out)
    else:
        out[path] = value


def diff(
    desired: Mapping[str, Any] | None,
    keep_arrays: bool = True,
    keep_empty_strings: bool = False,
) -> Modifier:
    """Build a :class:`Modifier` for *desired*.

    Args:
        desired: The fields to write.
        keep_arrays: Set lists wholesale instead of per element.
        keep_empty_strings: Write ``""`` instead of unsetting the field.
    """
    flat: dict[str, Any] = {}
    for key, value in (desired or {}).items():
        _flatten(value, str(key), keep_arrays, flat)

    modifier = Modifier()
    for path, value in flat.items():
        if value is None or (value == "" and not keep_empty_strings):
            modifier.unset[path] = ""
        else:
            modifier.set[path] = value
    return modifier


class ModifierDiffer:
    """Holds default options for :func:`diff`."""

    def __init__(self, keep_arrays: bool = True, keep_empty_strings: bool = False):
        self.keep_arrays = keep_arrays
        self.keep_empty_strings = keep_empty_strings

    def diff(self, desired: Mapping[str, Any] | None, **options: bool) -> Modifier:
        return diff(
            desired,
            keep_arrays=options.get("keep_arrays", self.keep_arrays),
            keep_empty_strings=options.get("keep_empty_strings", self.keep_empty_strings),
        )
