"""
Custom exceptions for doclayer.

Validation problems during coercion are logged and reported as
``RecordError`` values rather than raised; the exceptions below cover
the genuinely fatal paths.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


class DocLayerError(Exception):
    """Base exception for all doclayer errors."""

    def __init__(self, message: str, field: Optional[str] = None, record_index: Optional[int] = None):
        self.message = message
        self.field = field
        self.record_index = record_index

        error_parts = [message]
        if record_index is not None:
            error_parts.append(f"Record: {record_index}")
        if field is not None:
            error_parts.append(f"Field: {field}")

        super().__init__(" | ".join(error_parts))


class SchemaError(DocLayerError):
    """Raised when a field schema cannot be built."""
    pass


class ConfigurationError(DocLayerError):
    """Raised when configuration or wiring is invalid."""
    pass


class DocumentNotFoundError(DocLayerError):
    """Raised when an operation requires a document that does not exist."""
    pass


@dataclass
class RecordError:
    """Per-record coercion failure, kept alongside the (retained) record."""

    record_index: int
    field: str
    reason: str

    def __str__(self) -> str:
        return f"RecordError(record={self.record_index}, field='{self.field}', {self.reason})"
