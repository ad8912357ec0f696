"""Collection registry — load collection modules and cross-wire them.

Each module path names a package exposing a ``collections`` submodule.
That submodule either defines a ``collections`` mapping or simply has
:class:`Collection` instances as module attributes::

    # myapp/users/collections.py
    users = Collection("users", db, schema=[...])

    registry = load_collections(["myapp.users", "myapp.orders"])
    registry["users"].collections["orders"]
"""

from __future__ import annotations

import importlib
from typing import Iterable

from ..utils.logger import get_logger
from .collection import Collection
from .exceptions import ConfigurationError

logger = get_logger(__name__)


def _module_collections(module_path: str) -> dict[str, Collection]:
    target = f"{module_path}.collections"
    try:
        module = importlib.import_module(target)
    except ModuleNotFoundError as exc:
        raise ConfigurationError(f"Cannot import collection module '{target}': {exc}") from exc

    declared = getattr(module, "collections", None)
    if isinstance(declared, dict):
        items = declared.items()
    else:
        items = vars(module).items()
    return {name: value for name, value in items if isinstance(value, Collection)}


def load_collections(module_paths: Iterable[str]) -> dict[str, Collection]:
    """Import and merge collection instances, then let them see each other.

    Later modules win on name collisions.
    """
    instances: dict[str, Collection] = {}
    for path in module_paths:
        found = _module_collections(path)
        logger.debug("Loaded %d collections from %s", len(found), path)
        instances.update(found)

    for instance in instances.values():
        instance.use_collections(**instances)

    return instances
