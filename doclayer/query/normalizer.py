"""QueryNormalizer — turn loosely-typed filters into a selector + page descriptor."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from ..schemas.base import PageDescriptor

OPERATOR_PREFIX = "$"
DEFAULT_DIRECTION = -1
PAGE_KEYS = ("limit", "skip", "sort")


def format_query_operator(value: Any) -> Any:
    """Prefix each key of a plain mapping with ``$``; pass scalars through.

    ``{"gte": 5}`` -> ``{"$gte": 5}``; ``5`` -> ``5``.
    """
    if isinstance(value, Mapping):
        return {
            key if str(key).startswith(OPERATOR_PREFIX) else f"{OPERATOR_PREFIX}{key}": v
            for key, v in value.items()
        }
    return value


def format_fields(fields: Any = "") -> dict[str, int]:
    """Projection from a comma/space separated field list.

    ``"name, email phone"`` -> ``{"name": 1, "email": 1, "phone": 1}``
    """
    names = str(fields or "").replace(",", " ").split()
    return {name: 1 for name in names}


def _direction(value: Any) -> int:
    try:
        direction = int(float(value))
    except (TypeError, ValueError):
        return DEFAULT_DIRECTION
    if direction == 0:
        return DEFAULT_DIRECTION
    return 1 if direction > 0 else -1


def _as_int(value: Any) -> int:
    try:
        number = int(float(value))
    except (TypeError, ValueError):
        return 0
    return max(number, 0)


def normalize_sort(sort: Any) -> dict[str, int]:
    """Canonical ``{field: ±1}`` from the accepted sort shapes.

    - ``["age", -1]`` / ``["age"]`` -> ``{"age": -1}`` (non-numeric
      direction falls back to descending)
    - ``[["age", 1], ["name", -1]]`` -> ``{"age": 1, "name": -1}``
    - ``{"age": "1"}`` -> ``{"age": 1}``
    - ``"age"`` -> ``{"age": -1}``
    """
    if not sort:
        return {}
    if isinstance(sort, str):
        return {sort: DEFAULT_DIRECTION}
    if isinstance(sort, Mapping):
        return {str(k): _direction(v) for k, v in sort.items()}
    if isinstance(sort, (list, tuple)):
        if isinstance(sort[0], (list, tuple)):
            result: dict[str, int] = {}
            for pair in sort:
                if not pair:
                    continue
                result[str(pair[0])] = _direction(pair[1] if len(pair) > 1 else None)
            return result
        return {str(sort[0]): _direction(sort[1] if len(sort) > 1 else None)}
    return {}


def sort_spec(sort: Any) -> list[tuple[str, int]]:
    """Driver-ready ``[(field, direction), ...]`` for any accepted sort shape."""
    return list(normalize_sort(sort).items())


def normalize(
    query: Optional[Mapping[str, Any]] = None,
    parent_selector: Optional[Mapping[str, Any]] = None,
) -> tuple[dict[str, Any], PageDescriptor]:
    """Split *query* into a selector and a :class:`PageDescriptor`.

    ``limit``, ``skip`` and ``sort`` feed the page descriptor; every other key
    becomes a selector clause through :func:`format_query_operator`.
    *parent_selector* is merged last and wins on key collisions.
    """
    query = dict(query or {})
    limit = query.pop("limit", 0)
    skip = query.pop("skip", 0)
    sort = query.pop("sort", None)

    selector = {key: format_query_operator(value) for key, value in query.items()}
    selector.update(parent_selector or {})

    page = PageDescriptor(sort=normalize_sort(sort), skip=_as_int(skip), limit=_as_int(limit))
    return selector, page


class QueryNormalizer:
    """Object wrapper over :func:`normalize` with a fixed parent selector."""

    def __init__(self, parent_selector: Optional[Mapping[str, Any]] = None):
        self.parent_selector = dict(parent_selector or {})

    def normalize(
        self,
        query: Optional[Mapping[str, Any]] = None,
        parent_selector: Optional[Mapping[str, Any]] = None,
    ) -> tuple[dict[str, Any], PageDescriptor]:
        return normalize(query, {**self.parent_selector, **(parent_selector or {})})
