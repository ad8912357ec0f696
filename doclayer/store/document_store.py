"""DocumentStore — uniform CRUD surface over a Motor collection.

Every document read through the store is passed through :func:`with_id`,
which duplicates ``_id`` under the ``id`` alias.  Everything else is a thin
pass-through; driver exceptions (``pymongo.errors.*``) propagate unchanged.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Iterable, Mapping, Optional

from pymongo import ReturnDocument

from ..core.cache import DocumentCache, cache_key
from ..query.normalizer import format_fields
from ..utils.logger import get_logger

if TYPE_CHECKING:
    from motor.motor_asyncio import AsyncIOMotorCollection

logger = get_logger(__name__)

IDENTITY_FIELD = "_id"
ALIAS_FIELD = "id"


def with_id(doc: Optional[Mapping[str, Any]]) -> Optional[dict[str, Any]]:
    """Copy of *doc* with ``id`` mirroring ``_id``; ``None`` passes through."""
    if doc is None:
        return None
    return {**doc, ALIAS_FIELD: doc.get(IDENTITY_FIELD)}


def _driver_options(options: Mapping[str, Any]) -> dict[str, Any]:
    options = dict(options)
    projection = options.get("projection")
    if isinstance(projection, str):
        options["projection"] = format_fields(projection)
    return options


class IdentityCursor:
    """Lazy cursor that identity-wraps documents as they are read.

    Attributes not defined here (``sort``, ``limit``, ``batch_size`` ...) are
    delegated to the wrapped driver cursor. Chainable driver methods return
    the driver cursor itself, so those calls hand back this wrapper instead.
    """

    def __init__(self, cursor: Any, transform: Callable[[Any], Any] = with_id):
        self._cursor = cursor
        self._transform = transform

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        async for doc in self._cursor:
            yield self._transform(doc)

    async def to_list(self, length: Optional[int] = None) -> list[dict[str, Any]]:
        docs = await self._cursor.to_list(length=length)
        return [self._transform(doc) for doc in docs]

    def __getattr__(self, name: str) -> Any:
        attr = getattr(self._cursor, name)
        if not callable(attr):
            return attr

        def chained(*args: Any, **kwargs: Any) -> Any:
            result = attr(*args, **kwargs)
            return self if result is self._cursor else result

        return chained


class DocumentStore:
    """Thin wrapper around one driver collection.

    Args:
        collection: Motor ``AsyncIOMotorCollection`` (or any object with the
            same API).
        cache: Optional :class:`DocumentCache` consulted by ``find_by_id``.
    """

    def __init__(self, collection: "AsyncIOMotorCollection", cache: Optional[DocumentCache] = None):
        self.collection = collection
        self.cache = cache

    @property
    def name(self) -> str:
        return self.collection.name

    def _cache_key(self, identity: Any) -> str:
        return cache_key(self.name, identity)

    def invalidate(self, identity: Any) -> None:
        """Drop a cached document, if caching is enabled."""
        if self.cache is not None and identity is not None:
            self.cache.delete(self._cache_key(identity))

    # -- reads -----------------------------------------------------------

    def find(self, filter: Optional[Mapping[str, Any]] = None, **options: Any) -> IdentityCursor:
        return IdentityCursor(self.collection.find(filter or {}, **_driver_options(options)))

    async def find_one(self, filter: Optional[Mapping[str, Any]] = None, **options: Any) -> Optional[dict[str, Any]]:
        result = await self.collection.find_one(filter or {}, **_driver_options(options))
        return with_id(result)

    async def find_by_id(self, identity: Any) -> Optional[dict[str, Any]]:
        if identity is None or identity == "":
            return None
        if self.cache is not None:
            cached = self.cache.get(self._cache_key(identity))
            if cached is not None:
                return cached
        logger.debug("find_by_id %s.%s", self.name, identity)
        doc = await self.find_one({IDENTITY_FIELD: identity})
        if doc is not None and self.cache is not None:
            self.cache.set(self._cache_key(identity), doc)
        return doc

    async def find_all_by_id(self, ids: Iterable[Any] = ()) -> list[dict[str, Any]]:
        """Fetch documents one round-trip per id, skipping missing ones.

        Sequential on purpose; use ``find({"_id": {"$in": ids}})`` for
        large id lists.
        """
        result = []
        for identity in ids:
            doc = await self.find_by_id(identity)
            if doc is not None:
                result.append(doc)
        return result

    async def find_one_and_delete(self, filter: Mapping[str, Any], **options: Any) -> Optional[dict[str, Any]]:
        result = await self.collection.find_one_and_delete(filter, **_driver_options(options))
        return with_id(result)

    async def find_one_and_replace(
        self, filter: Mapping[str, Any], replacement: Mapping[str, Any], **options: Any
    ) -> Optional[dict[str, Any]]:
        options.setdefault("return_document", ReturnDocument.AFTER)
        result = await self.collection.find_one_and_replace(filter, replacement, **_driver_options(options))
        return with_id(result)

    async def find_one_and_update(
        self, filter: Mapping[str, Any], update: Mapping[str, Any], **options: Any
    ) -> Optional[dict[str, Any]]:
        options.setdefault("return_document", ReturnDocument.AFTER)
        result = await self.collection.find_one_and_update(filter, update, **_driver_options(options))
        return with_id(result)

    # -- writes ----------------------------------------------------------

    async def insert_one(self, document: Mapping[str, Any], **options: Any) -> Optional[dict[str, Any]]:
        document = dict(document)
        result = await self.collection.insert_one(document, **options)
        document[IDENTITY_FIELD] = result.inserted_id
        return with_id(document)

    async def insert_many(self, documents: Iterable[Mapping[str, Any]], **options: Any) -> list[dict[str, Any]]:
        documents = [dict(doc) for doc in documents]
        result = await self.collection.insert_many(documents, **options)
        for doc, inserted_id in zip(documents, result.inserted_ids):
            doc[IDENTITY_FIELD] = inserted_id
        return [with_id(doc) for doc in documents]

    async def replace_one(self, filter: Mapping[str, Any], replacement: Mapping[str, Any], **options: Any):
        return await self.collection.replace_one(filter, replacement, **options)

    async def update_one(
        self, filter: Mapping[str, Any], update: Mapping[str, Any], **options: Any
    ) -> Optional[dict[str, Any]]:
        """Apply *update* then re-read the first match of *filter*."""
        await self.collection.update_one(filter, update, **options)
        return await self.find_one(filter)

    async def update_many(self, filter: Mapping[str, Any], update: Mapping[str, Any], **options: Any):
        return await self.collection.update_many(filter, update, **options)

    async def delete_one(self, filter: Mapping[str, Any], **options: Any):
        return await self.collection.delete_one(filter, **options)

    async def delete_many(self, filter: Mapping[str, Any], **options: Any):
        return await self.collection.delete_many(filter, **options)

    async def bulk_write(self, requests: list[Any], **options: Any):
        return await self.collection.bulk_write(requests, **options)

    # -- counting & aggregation -----------------------------------------

    async def count_documents(self, filter: Optional[Mapping[str, Any]] = None, **options: Any) -> int:
        return await self.collection.count_documents(filter or {}, **options)

    async def estimated_document_count(self, **options: Any) -> int:
        return await self.collection.estimated_document_count(**options)

    async def distinct(self, key: str, filter: Optional[Mapping[str, Any]] = None, **options: Any) -> list[Any]:
        return await self.collection.distinct(key, filter, **options)

    def aggregate(self, pipeline: list[Mapping[str, Any]], **options: Any):
        return self.collection.aggregate(pipeline, **options)

    # -- indexes ---------------------------------------------------------

    async def create_index(self, keys: Any, **options: Any) -> str:
        return await self.collection.create_index(keys, **options)

    async def create_indexes(self, indexes: list[Any], **options: Any) -> list[str]:
        return await self.collection.create_indexes(indexes, **options)

    async def index_information(self, **options: Any) -> dict[str, Any]:
        return await self.collection.index_information(**options)

    async def index_exists(self, names: str | Iterable[str]) -> bool:
        if isinstance(names, str):
            names = [names]
        info = await self.index_information()
        return all(name in info for name in names)

    def list_indexes(self, **options: Any):
        return self.collection.list_indexes(**options)

    async def drop_index(self, index_or_name: Any, **options: Any) -> None:
        return await self.collection.drop_index(index_or_name, **options)

    async def drop_indexes(self, **options: Any) -> None:
        return await self.collection.drop_indexes(**options)

    async def re_index(self) -> dict[str, Any]:
        return await self.collection.database.command("reIndex", self.name)

    # -- collection admin ------------------------------------------------

    async def rename(self, new_name: str, **options: Any) -> Any:
        return await self.collection.rename(new_name, **options)

    async def stats(self) -> dict[str, Any]:
        return await self.collection.database.command("collStats", self.name)

    async def options(self, **options: Any) -> dict[str, Any]:
        return await self.collection.options(**options)

    async def is_capped(self) -> bool:
        return bool((await self.options()).get("capped", False))

    async def drop(self, **options: Any) -> None:
        return await self.collection.drop(**options)
