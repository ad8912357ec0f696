"""Shared fixtures: an in-memory stand-in for Motor collections."""

from __future__ import annotations

import logging
from types import SimpleNamespace
from typing import Any

import pytest
from bson import ObjectId

from doclayer.schemas.field_spec import FieldSpec
from doclayer.utils.logger import ROOT_LOGGER_NAME

_MISSING = object()


def _get_path(doc: dict[str, Any], path: str) -> Any:
    cur: Any = doc
    for part in path.split("."):
        if isinstance(cur, dict) and part in cur:
            cur = cur[part]
        elif isinstance(cur, list) and part.isdigit() and int(part) < len(cur):
            cur = cur[int(part)]
        else:
            return _MISSING
    return cur


def _set_path(doc: dict[str, Any], path: str, value: Any) -> None:
    parts = path.split(".")
    cur = doc
    for part in parts[:-1]:
        if isinstance(cur, list):
            cur = cur[int(part)]
            continue
        cur = cur.setdefault(part, {})
    if isinstance(cur, list):
        cur[int(parts[-1])] = value
    else:
        cur[parts[-1]] = value


def _unset_path(doc: dict[str, Any], path: str) -> None:
    parts = path.split(".")
    cur: Any = doc
    for part in parts[:-1]:
        if not isinstance(cur, dict) or part not in cur:
            return
        cur = cur[part]
    if isinstance(cur, dict):
        cur.pop(parts[-1], None)


def _matches_operator(value: Any, op: str, expected: Any) -> bool:
    if op == "$eq":
        return value == expected
    if op == "$ne":
        return value != expected
    if op == "$in":
        return value in expected
    if op == "$nin":
        return value not in expected
    if op == "$exists":
        return (value is not _MISSING) == bool(expected)
    if value is _MISSING:
        return False
    if op == "$gt":
        return value > expected
    if op == "$gte":
        return value >= expected
    if op == "$lt":
        return value < expected
    if op == "$lte":
        return value <= expected
    raise ValueError(f"unsupported operator {op}")


def matches(doc: dict[str, Any], selector: dict[str, Any]) -> bool:
    for key, expected in selector.items():
        value = _get_path(doc, key)
        if isinstance(expected, dict) and expected and all(k.startswith("$") for k in expected):
            if not all(_matches_operator(value, op, arg) for op, arg in expected.items()):
                return False
        elif value is _MISSING or value != expected:
            return False
    return True


def _project(doc: dict[str, Any], projection: Any) -> dict[str, Any]:
    if not projection:
        return dict(doc)
    keep = {k for k, v in projection.items() if v}
    keep.add("_id")
    return {k: v for k, v in doc.items() if k in keep}


class FakeCursor:
    def __init__(self, docs: list[dict[str, Any]]):
        self._docs = docs

    def sort(self, key, direction=None):
        keys = key if isinstance(key, list) else [(key, direction or 1)]
        for field, order in reversed(keys):
            self._docs.sort(key=lambda d: _get_path(d, field), reverse=order < 0)
        return self

    def skip(self, count):
        self._docs = self._docs[count:]
        return self

    def limit(self, count):
        if count:
            self._docs = self._docs[:count]
        return self

    async def to_list(self, length: int | None = None) -> list[dict[str, Any]]:
        return list(self._docs if length is None else self._docs[:length])

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for doc in self._docs:
            yield doc


class FakeCollection:
    """Just enough of ``AsyncIOMotorCollection`` for the collection layer."""

    def __init__(self, name: str, database: "FakeDatabase"):
        self.name = name
        self.database = database
        self.docs: list[dict[str, Any]] = []
        self.calls: list[str] = []

    def _matching(self, selector: dict[str, Any] | None) -> list[dict[str, Any]]:
        return [d for d in self.docs if matches(d, selector or {})]

    @property
    def writes(self) -> list[str]:
        return [c for c in self.calls if c.startswith(("insert", "update", "delete", "find_one_and"))]

    def find(self, filter=None, projection=None, sort=None, skip=0, limit=0, **_):
        self.calls.append("find")
        docs = self._matching(filter)
        for key, direction in reversed(sort or []):
            docs.sort(key=lambda d: _get_path(d, key), reverse=direction < 0)
        docs = docs[skip:]
        if limit:
            docs = docs[:limit]
        return FakeCursor([_project(d, projection) for d in docs])

    async def find_one(self, filter=None, projection=None, **_):
        self.calls.append("find_one")
        docs = self._matching(filter)
        return _project(docs[0], projection) if docs else None

    async def insert_one(self, document, **_):
        self.calls.append("insert_one")
        document.setdefault("_id", ObjectId())
        self.docs.append(dict(document))
        return SimpleNamespace(inserted_id=document["_id"])

    async def insert_many(self, documents, **_):
        self.calls.append("insert_many")
        ids = []
        for document in documents:
            document.setdefault("_id", ObjectId())
            self.docs.append(dict(document))
            ids.append(document["_id"])
        return SimpleNamespace(inserted_ids=ids)

    def _apply(self, doc, update):
        for path, value in update.get("$set", {}).items():
            _set_path(doc, path, value)
        for path in update.get("$unset", {}):
            _unset_path(doc, path)

    async def find_one_and_update(self, filter, update, return_document=None, **_):
        self.calls.append("find_one_and_update")
        docs = self._matching(filter)
        if not docs:
            return None
        self._apply(docs[0], update)
        return dict(docs[0])

    async def update_one(self, filter, update, **_):
        self.calls.append("update_one")
        docs = self._matching(filter)
        if docs:
            self._apply(docs[0], update)
        return SimpleNamespace(matched_count=len(docs[:1]), modified_count=len(docs[:1]))

    async def update_many(self, filter, update, **_):
        self.calls.append("update_many")
        docs = self._matching(filter)
        for doc in docs:
            self._apply(doc, update)
        return SimpleNamespace(matched_count=len(docs), modified_count=len(docs))

    async def find_one_and_delete(self, filter, **_):
        self.calls.append("find_one_and_delete")
        docs = self._matching(filter)
        if not docs:
            return None
        self.docs.remove(docs[0])
        return docs[0]

    async def delete_many(self, filter, **_):
        self.calls.append("delete_many")
        docs = self._matching(filter)
        for doc in docs:
            self.docs.remove(doc)
        return SimpleNamespace(deleted_count=len(docs))

    async def count_documents(self, filter, **_):
        self.calls.append("count_documents")
        return len(self._matching(filter))

    async def distinct(self, key, filter=None, **_):
        values = []
        for doc in self._matching(filter):
            value = _get_path(doc, key)
            if value is not _MISSING and value not in values:
                values.append(value)
        return values

    async def index_information(self, **_):
        return {"_id_": {"key": [("_id", 1)]}}

    async def options(self, **_):
        return {}


class FakeDatabase:
    def __init__(self):
        self._collections: dict[str, FakeCollection] = {}
        self.commands: list[tuple] = []

    def __getitem__(self, name: str) -> FakeCollection:
        if name not in self._collections:
            self._collections[name] = FakeCollection(name, self)
        return self._collections[name]

    async def command(self, *args, **kwargs):
        self.commands.append(args)
        return {"ok": 1}


@pytest.fixture
def db() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def people_schema() -> list[FieldSpec]:
    return [
        FieldSpec(name="firstName", required=True, cast="firstName"),
        FieldSpec(name="lastName", required=True, cast="lastName"),
        FieldSpec(name="phone", cast="phone"),
        FieldSpec(name="birthday", type="date"),
    ]


@pytest.fixture(autouse=True)
def _restore_package_logger():
    root = logging.getLogger(ROOT_LOGGER_NAME)
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
