"""Thin persistence wrapper with identity aliasing."""

from .document_store import ALIAS_FIELD, IDENTITY_FIELD, DocumentStore, IdentityCursor, with_id

__all__ = ["ALIAS_FIELD", "IDENTITY_FIELD", "DocumentStore", "IdentityCursor", "with_id"]
