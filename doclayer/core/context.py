"""Per-call context passed through the lifecycle pipeline."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional


@dataclass(frozen=True)
class Context:
    """Ambient data for a single collection operation.

    Attributes:
        user: Acting principal; its ``_id`` becomes ``owner`` on create.
        options: Driver keyword arguments (``projection``, ``session`` ...)
            plus ``keep_arrays`` / ``keep_empty_strings`` for ``save``.
        resolve_data: Optional ``(doc, ctx) -> doc`` resolver (sync or async)
            used instead of the default identity-wrapping.
        collection: Name of another collection to run ``search`` against.
        selector: Set by ``save`` before its hooks run.
        doc: Existing document, set by ``save`` before its hooks run.
        data: Written data, set before ``after*`` hooks run.
    """

    user: Any = None
    options: Mapping[str, Any] = field(default_factory=dict)
    resolve_data: Optional[Callable[..., Any]] = None
    collection: Optional[str] = None
    selector: Optional[dict[str, Any]] = None
    doc: Optional[dict[str, Any]] = None
    data: Optional[dict[str, Any]] = None

    def extend(self, **changes: Any) -> "Context":
        return dataclasses.replace(self, **changes)

    @property
    def principal_id(self) -> Any:
        if self.user is None:
            return None
        if isinstance(self.user, Mapping):
            return self.user.get("_id")
        return getattr(self.user, "_id", None) or getattr(self.user, "id", None)
