"""SchemaCoercer — validate and normalize raw documents against a FieldSpec list.

Input comes in three shapes (a single document, a list of documents, or a
paginated ``{"data": [...], "limit": n}`` envelope).  The shape is detected
once at the boundary, every record is coerced in a flat list, and the
original shape is rebuilt on the way out.

Coercion is best-effort: problems are logged and reported as
:class:`RecordError` values, and the offending record stays in the output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..core.exceptions import RecordError
from ..utils.logger import get_logger
from .field_spec import FieldSpec, build_schema

logger = get_logger(__name__)


class Shape(Enum):
    SINGLE = "single"
    LIST = "list"
    PAGE = "page"


@dataclass
class CoercionResult:
    """Output of :meth:`SchemaCoercer.coerce_detailed`.

    Attributes:
        data: Coerced input, same shape as what was passed in.
        errors: One entry per failed field per record.
    """

    data: Any
    errors: list[RecordError] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0

    @property
    def failed_records(self) -> set[int]:
        return {e.record_index for e in self.errors}


def detect_shape(data: Any) -> Shape:
    if isinstance(data, Mapping):
        if isinstance(data.get("data"), list) and "limit" in data:
            return Shape.PAGE
        return Shape.SINGLE
    if isinstance(data, (list, tuple)):
        return Shape.LIST
    raise TypeError(f"Cannot coerce value of type {type(data).__name__}")


def to_datetime(value: Any) -> datetime:
    """Convert a date-ish value; raises ``ValueError`` when it cannot."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        # epoch milliseconds
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return datetime.fromisoformat(text)
    raise ValueError(f"not a date: {value!r}")


def _is_present(value: Any) -> bool:
    return value is not None and value != ""


class SchemaCoercer:
    """Applies a fixed schema to incoming documents.

    Args:
        schema: ``FieldSpec`` objects (or dicts accepted by
            :func:`build_schema`), evaluated in order.
    """

    def __init__(self, schema: Iterable[Any] = ()):
        self.schema: tuple[FieldSpec, ...] = build_schema(schema)
        self._declared = frozenset(f.name for f in self.schema)

    def coerce(self, data: Any, partial: bool = False) -> Any:
        return self.coerce_detailed(data, partial=partial).data

    def coerce_detailed(self, data: Any, partial: bool = False) -> CoercionResult:
        """Coerce *data* and report per-record errors.

        Args:
            data: A document, a list of documents, or a page envelope.
            partial: Skip the missing-required policy (partial updates).
                Date conversion and casts still apply to present fields.
        """
        shape = detect_shape(data)
        if shape is Shape.PAGE:
            records: Sequence[Mapping[str, Any]] = data["data"]
        elif shape is Shape.LIST:
            records = data
        else:
            records = [data]

        errors: list[RecordError] = []
        if self.schema:
            coerced = [
                self._coerce_record(record, idx, errors, partial)
                for idx, record in enumerate(records)
            ]
        else:
            coerced = [dict(record) for record in records]

        if shape is Shape.PAGE:
            return CoercionResult(data={**data, "data": coerced}, errors=errors)
        if shape is Shape.LIST:
            return CoercionResult(data=coerced, errors=errors)
        return CoercionResult(data=coerced[0], errors=errors)

    # -- per record ------------------------------------------------------

    def _coerce_record(
        self,
        source: Mapping[str, Any],
        idx: int,
        errors: list[RecordError],
        partial: bool,
    ) -> dict[str, Any]:
        declared = {k: v for k, v in source.items() if k in self._declared}
        rest = {k: v for k, v in source.items() if k not in self._declared}

        def fail(spec: FieldSpec, reason: str) -> None:
            logger.warning("Record %d: field '%s' %s", idx, spec.name, reason)
            errors.append(RecordError(record_index=idx, field=spec.name, reason=reason))

        for spec in self.schema:
            cast = spec.cast_function

            if not partial and spec.required and spec.name not in declared:
                if any(name in source for name in spec.exception_fields):
                    pass
                elif cast is not None and _is_present(derived := cast(source, None)):
                    declared[spec.name] = derived
                else:
                    fail(spec, "is missing")

            if spec.type == "date" and spec.name in declared:
                try:
                    declared[spec.name] = to_datetime(declared[spec.name])
                except (TypeError, ValueError, OverflowError, OSError):
                    fail(spec, "is not a valid date")

            if cast is not None and _is_present(declared.get(spec.name)):
                value = cast(source, declared[spec.name])
                if _is_present(value):
                    declared[spec.name] = value
                else:
                    fail(spec, f"failed '{spec.cast.value}' cast")

        return {**declared, **rest}


def coerce(schema: Iterable[Any], data: Any, partial: bool = False) -> Any:
    """Functional shortcut for ``SchemaCoercer(schema).coerce(data)``."""
    return SchemaCoercer(schema).coerce(data, partial=partial)
