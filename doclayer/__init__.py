"""
doclayer - Document collections with schema coercion and lifecycle hooks

Sits between application code and MongoDB (via Motor): normalizes ad-hoc
queries, coerces documents against declared fields, turns partial writes
into ``$set``/``$unset`` modifiers and runs every write through
before/after hooks.
"""

from .core import (
    Collection,
    CollectionConfig,
    CollectionHooks,
    Context,
    DocLayerError,
    DocumentNotFoundError,
    SearchPage,
    load_collections,
)
from .core.connect import connect_to_database
from .schemas import FieldSpec, SchemaCoercer
from .query import ModifierDiffer, QueryNormalizer

__version__ = "0.1.0"

__all__ = [
    'Collection',
    'CollectionConfig',
    'CollectionHooks',
    'Context',
    'DocLayerError',
    'DocumentNotFoundError',
    'SearchPage',
    'load_collections',
    'connect_to_database',
    'FieldSpec',
    'SchemaCoercer',
    'ModifierDiffer',
    'QueryNormalizer',
]
