"""Query normalization and update modifiers."""

from .modifier import Modifier, ModifierDiffer, diff
from .normalizer import (
    QueryNormalizer,
    format_fields,
    format_query_operator,
    normalize,
    normalize_sort,
    sort_spec,
)

__all__ = [
    "Modifier",
    "ModifierDiffer",
    "diff",
    "QueryNormalizer",
    "format_fields",
    "format_query_operator",
    "normalize",
    "normalize_sort",
    "sort_spec",
]
