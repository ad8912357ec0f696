"""
Core functionality for doclayer: configuration, errors, hooks and the
lifecycle-managed ``Collection``.
"""

from .exceptions import (
    ConfigurationError,
    DocLayerError,
    DocumentNotFoundError,
    RecordError,
    SchemaError,
)
from .config import CollectionConfig
from .cache import DocumentCache, cache_key
from .context import Context
from .hooks import CollectionHooks
from .collection import Collection, SearchPage
from .registry import load_collections

__all__ = [
    'ConfigurationError',
    'DocLayerError',
    'DocumentNotFoundError',
    'RecordError',
    'SchemaError',
    'CollectionConfig',
    'DocumentCache',
    'cache_key',
    'Context',
    'CollectionHooks',
    'Collection',
    'SearchPage',
    'load_collections',
]
