"""Collection — lifecycle pipeline over a :class:`DocumentStore`.

Every write runs as a single pass::

    create:  stamp -> before -> before_create -> coerce -> insert -> after -> after_create -> get
    save:    get -> before -> before_save -> coerce(partial) -> diff -> update -> after -> after_save -> get
    remove:  get -> before_remove -> delete -> after_remove

There are no retries; driver errors propagate to the caller.
"""

from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Optional

from ..query.modifier import diff
from ..query.normalizer import normalize
from ..schemas.coercer import SchemaCoercer
from ..schemas.field_spec import FieldSpec, build_schema
from ..store.document_store import ALIAS_FIELD, IDENTITY_FIELD, DocumentStore, with_id
from ..utils.logger import get_logger
from .cache import DocumentCache
from .config import CollectionConfig
from .context import Context
from .exceptions import ConfigurationError, DocumentNotFoundError
from .hooks import CollectionHooks, fire_after, run_before

MODIFIER_OPTIONS = ("keep_arrays", "keep_empty_strings")
COPY_EXCLUDED_FIELDS = (IDENTITY_FIELD, ALIAS_FIELD, "createdAt", "updatedAt", "owner")


@dataclass
class SearchPage:
    """Result of :meth:`Collection.search`.

    Attributes:
        data: Resolved documents for this page.
        skip: Documents skipped.
        limit: Page size (0 = unbounded).
        sort: Canonical sort mapping.
        count: Total documents matching the selector.
        pages: ``ceil(count / limit)``, or 0 when unbounded.
    """

    data: list[Any] = field(default_factory=list)
    skip: int = 0
    limit: int = 0
    sort: dict[str, int] = field(default_factory=dict)
    count: int = 0
    pages: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "data": self.data,
            "skip": self.skip,
            "limit": self.limit,
            "sort": self.sort,
            "count": self.count,
            "pages": self.pages,
        }


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _query_options(options: Mapping[str, Any]) -> dict[str, Any]:
    """Driver keyword arguments from *options*, without the modifier options."""
    return {key: value for key, value in options.items() if key not in MODIFIER_OPTIONS}


def _as_selector(query: Any) -> dict[str, Any]:
    if query is None:
        return {}
    if isinstance(query, Mapping):
        return dict(query)
    return {IDENTITY_FIELD: query}


class Collection(DocumentStore):
    """A named collection with schema coercion and lifecycle hooks.

    Args:
        name: Collection name in *database*.
        database: Motor ``AsyncIOMotorDatabase`` (anything supporting
            ``database[name]``).
        schema: ``FieldSpec`` objects or dicts, validated once here.
        hooks: Optional :class:`CollectionHooks`.
        config: Optional :class:`CollectionConfig`.
        cache: Optional :class:`DocumentCache`; built from *config* when
            ``enable_caching`` is set and none is given.

    Raises:
        ConfigurationError: If *database* is None.
    """

    def __init__(
        self,
        name: str,
        database: Any,
        schema: Optional[Iterable[Any]] = None,
        hooks: Optional[CollectionHooks] = None,
        config: Optional[CollectionConfig] = None,
        cache: Optional[DocumentCache] = None,
    ):
        if database is None:
            raise ConfigurationError(f"No database handle given for collection '{name}'")

        self.config = config or CollectionConfig()
        if cache is None and self.config.enable_caching:
            cache = DocumentCache(cache_dir=self.config.cache_dir, ttl=self.config.cache_ttl)

        super().__init__(database[name], cache=cache)
        self.db = database
        self._name = name
        self.hooks = hooks or CollectionHooks()
        self.schema: tuple[FieldSpec, ...] = build_schema(schema)
        self._coercer = SchemaCoercer(self.schema)
        self.collections: dict[str, "Collection"] = {}

        self.logger = get_logger(f"collections.{name}")
        self.logging = False
        if self.config.enable_logging:
            self.enable_log()

    @property
    def name(self) -> str:
        return self._name

    def __repr__(self) -> str:
        return f"Collection({self._name!r}, fields={[f.name for f in self.schema]})"

    # -- setup -----------------------------------------------------------

    def add_fields(self, *fields: Any) -> tuple[FieldSpec, ...]:
        """Append fields to the schema; existing fields cannot be replaced."""
        self.schema = build_schema([*self.schema, *fields])
        self._coercer = SchemaCoercer(self.schema)
        return self.schema

    def use_collections(self, **instances: "Collection") -> None:
        self.collections = {**self.collections, **instances}

    # -- logging ---------------------------------------------------------

    def log(self, message: str, *args: Any) -> None:
        if self.logging:
            self.logger.info(message, *args)

    def enable_log(self) -> None:
        self.logging = True

    def disable_log(self) -> None:
        self.logging = False

    # -- schema ----------------------------------------------------------

    def run_schema(self, data: Any, partial: bool = False) -> Any:
        """Coerce a document, a list, or a page envelope against the schema."""
        return self._coercer.coerce(data, partial=partial)

    def use_schema(self, data: dict[str, Any]) -> dict[str, Any]:
        """Identity pass: mirror ``_id`` under ``id`` when only ``_id`` is set."""
        if not data.get(ALIAS_FIELD) and data.get(IDENTITY_FIELD):
            data[ALIAS_FIELD] = data[IDENTITY_FIELD]
        return data

    def doc(self, doc: Mapping[str, Any], ctx: Optional[Context] = None) -> dict[str, Any]:
        """Default per-document resolution."""
        return with_id(doc)

    async def _resolve(self, doc: Mapping[str, Any], ctx: Context) -> Any:
        if ctx.resolve_data is None:
            return self.doc(doc, ctx)
        result = ctx.resolve_data(doc, ctx)
        if inspect.isawaitable(result):
            result = await result
        return result

    # -- operations ------------------------------------------------------

    async def create(self, input: Optional[Mapping[str, Any]] = None, ctx: Optional[Context] = None) -> Any:
        ctx = ctx or Context()
        data: dict[str, Any] = {**(input or {}), "createdAt": _now()}
        owner = ctx.principal_id
        if owner is not None:
            data["owner"] = owner

        data = await run_before(self.hooks.before, data, ctx)
        data = await run_before(self.hooks.before_create, data, ctx)

        self.log("create %s", data)
        data = self.use_schema(self.run_schema(data))
        doc = await self.insert_one(data)

        after_ctx = ctx.extend(data=data)
        await fire_after(self.hooks.after, doc, after_ctx)
        await fire_after(self.hooks.after_create, doc, after_ctx)

        return await self.get(doc[IDENTITY_FIELD], ctx)

    async def get(self, query: Any = None, ctx: Optional[Context] = None) -> Any:
        ctx = ctx or Context()
        selector = _as_selector(query)
        self.log("get %s", selector)

        if not selector:
            return None

        doc = await self.find_one(selector, **_query_options(ctx.options))
        if doc is None:
            return None
        if ctx.resolve_data is not None:
            return await self._resolve(doc, ctx)
        return self.use_schema(self.doc(doc, ctx))

    async def search(
        self,
        query: Optional[Mapping[str, Any]] = None,
        parent_selector: Optional[Mapping[str, Any]] = None,
        ctx: Optional[Context] = None,
    ) -> SearchPage:
        ctx = ctx or Context()
        selector, page = normalize(query, parent_selector)
        find_options = page.find_options()

        self.log("find %s %s %s", selector, find_options, ctx.collection or "")

        if ctx.collection:
            target = self.db[ctx.collection]
            count = await target.count_documents(selector)
            docs = await target.find(selector, **find_options).to_list(length=None)
        else:
            count = await self.count_documents(selector)
            docs = await self.find(selector, **find_options).to_list(length=None)

        data = await asyncio.gather(*(self._resolve(doc, ctx) for doc in docs))

        return SearchPage(
            data=list(data),
            skip=page.skip,
            limit=page.limit,
            sort=page.sort,
            count=count,
            pages=page.pages(count),
        )

    async def save(self, query: Any = None, data: Optional[Mapping[str, Any]] = None, ctx: Optional[Context] = None) -> Any:
        ctx = ctx or Context()
        selector = _as_selector(query)
        options = _query_options(ctx.options)
        modifier_options = {
            "keep_arrays": self.config.keep_arrays,
            "keep_empty_strings": self.config.keep_empty_strings,
            **{key: ctx.options[key] for key in MODIFIER_OPTIONS if key in ctx.options},
        }
        ctx = ctx.extend(options=options)

        doc = await self.get(selector, ctx) if selector else None

        hook_ctx = ctx.extend(selector=selector, doc=doc)
        data = dict(data or {})
        data = await run_before(self.hooks.before, data, hook_ctx)
        data = await run_before(self.hooks.before_save, data, hook_ctx)
        data = self.run_schema(data, partial=True)

        modifier = diff(data, **modifier_options)
        self.log("save %s %s %s", selector, modifier.to_update(), options)

        if not selector or modifier.is_empty:
            return None

        modifier.set["updatedAt"] = _now()
        updated = await self.find_one_and_update(selector, modifier.to_update(), **options)

        after_ctx = ctx.extend(data=data)
        await fire_after(self.hooks.after, updated, after_ctx)
        await fire_after(self.hooks.after_save, updated, after_ctx)

        if updated is not None:
            self.invalidate(updated.get(IDENTITY_FIELD))

        return await self.get(selector, ctx)

    async def remove(self, query: Any = None, ctx: Optional[Context] = None) -> Any:
        ctx = ctx or Context()
        selector = _as_selector(query)
        self.log("remove %s", selector)

        if not selector:
            return None

        doc = await self.get(selector, ctx.extend(resolve_data=None))
        if not doc:
            return None

        await run_before(self.hooks.before_remove, doc, ctx)
        deleted = await self.find_one_and_delete({IDENTITY_FIELD: doc[IDENTITY_FIELD]}, **_query_options(ctx.options))
        await fire_after(self.hooks.after_remove, deleted, ctx)

        self.invalidate(doc[IDENTITY_FIELD])
        return with_id(deleted)

    async def remove_many(self, query: Optional[Mapping[str, Any]] = None, ctx: Optional[Context] = None):
        self.log("removeMany %s", query)
        return await self.delete_many(query or {})

    async def copy(self, identity: Any) -> dict[str, Any]:
        """Return a document's content without identity, owner or timestamps.

        Raises:
            DocumentNotFoundError: If no document has this identity.
        """
        doc = await self.find_one({IDENTITY_FIELD: identity})
        if doc is None:
            raise DocumentNotFoundError(f"Copy source not found in '{self._name}': {identity}")
        return {k: v for k, v in doc.items() if k not in COPY_EXCLUDED_FIELDS}
