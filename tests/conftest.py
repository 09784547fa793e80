import copy
import os
import re
from types import SimpleNamespace

# Settings are read at import time
os.environ.setdefault("DISCORD_TOKEN", "test-token")
os.environ.setdefault("MONGO_URI", "mongodb://localhost:27017")
os.environ.setdefault("OWNER_ID", "1")

import pytest
from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from modules.invite_tracker.models import InviteInfo
from modules.invite_tracker.source import InviteFetchError


def _matches_value(stored, expected) -> bool:
    if isinstance(expected, dict) and "$regex" in expected:
        pattern = re.compile(expected["$regex"])
        values = stored if isinstance(stored, list) else [stored]
        return any(isinstance(v, str) and pattern.search(v) for v in values)
    if isinstance(expected, dict) and "$exists" in expected:
        return (stored is not None) == expected["$exists"]
    if isinstance(stored, list) and not isinstance(expected, list):
        return expected in stored
    return stored == expected


def _matches(doc: dict, query: dict) -> bool:
    return all(_matches_value(doc.get(key), expected) for key, expected in query.items())


def _sorted(docs: list[dict], sort) -> list[dict]:
    for key, direction in reversed(sort or []):
        docs = sorted(docs, key=lambda d: d.get(key, 0), reverse=direction < 0)
    return docs


class FakeCursor:
    def __init__(self, docs: list[dict]):
        self._docs = docs

    def sort(self, sort):
        self._docs = _sorted(self._docs, sort)
        return self

    def limit(self, n: int):
        self._docs = self._docs[:n]
        return self

    def __aiter__(self):
        self._iter = iter(self._docs)
        return self

    async def __anext__(self):
        try:
            return next(self._iter)
        except StopIteration:
            raise StopAsyncIteration


class FakeCollection:
    """Just enough of a motor collection for the ledger and tickets."""

    def __init__(self):
        self.docs: list[dict] = []
        self.fail_with: Exception | None = None

    def _check(self):
        if self.fail_with:
            raise self.fail_with

    def _first(self, query, sort=None):
        matches = _sorted([d for d in self.docs if _matches(d, query)], sort)
        return matches[0] if matches else None

    @staticmethod
    def _apply(doc: dict, update: dict, inserted: bool):
        if inserted:
            doc.update(update.get("$setOnInsert", {}))
        doc.update(update.get("$set", {}))
        for key, amount in update.get("$inc", {}).items():
            doc[key] = doc.get(key, 0) + amount
        for key, value in update.get("$push", {}).items():
            doc.setdefault(key, []).append(value)

    async def find_one(self, query, sort=None):
        self._check()
        doc = self._first(query, sort)
        return copy.deepcopy(doc)

    def find(self, query):
        self._check()
        return FakeCursor([copy.deepcopy(d) for d in self.docs if _matches(d, query)])

    async def insert_one(self, doc):
        self._check()
        doc = copy.deepcopy(doc)
        doc.setdefault("_id", ObjectId())
        self.docs.append(doc)
        return SimpleNamespace(inserted_id=doc["_id"])

    async def update_one(self, query, update, upsert=False):
        self._check()
        doc = self._first(query)
        if doc is None:
            if not upsert:
                return SimpleNamespace(modified_count=0, upserted_id=None)
            doc = {k: v for k, v in query.items() if not isinstance(v, dict)}
            doc["_id"] = ObjectId()
            self._apply(doc, update, inserted=True)
            self.docs.append(doc)
            return SimpleNamespace(modified_count=0, upserted_id=doc["_id"])
        self._apply(doc, update, inserted=False)
        return SimpleNamespace(modified_count=1, upserted_id=None)

    async def find_one_and_update(self, query, update, upsert=False, return_document=ReturnDocument.BEFORE):
        self._check()
        doc = self._first(query)
        before = copy.deepcopy(doc)
        if doc is None:
            if not upsert:
                return None
            doc = {k: v for k, v in query.items() if not isinstance(v, dict)}
            doc["_id"] = ObjectId()
            self._apply(doc, update, inserted=True)
            self.docs.append(doc)
        else:
            self._apply(doc, update, inserted=False)
        return copy.deepcopy(doc) if return_document == ReturnDocument.AFTER else before

    async def count_documents(self, query):
        self._check()
        return sum(1 for d in self.docs if _matches(d, query))


class FakeInviteSource:
    """Serves canned invite lists per guild; an exception entry simulates an API failure."""

    def __init__(self, invites: dict[int, list] = None):
        self.invites = invites or {}
        self.calls = 0

    def set(self, guild_id: int, invites):
        self.invites[guild_id] = invites

    async def fetch_invites(self, guild_id: int) -> list[InviteInfo]:
        self.calls += 1
        result = self.invites.get(guild_id)
        if result is None:
            raise InviteFetchError(guild_id, "guild not in cache")
        if isinstance(result, Exception):
            raise result
        return [InviteInfo(code=c, uses=u, inviter_id=i) for c, u, i in result]


@pytest.fixture
def collection():
    return FakeCollection()


@pytest.fixture
def source():
    return FakeInviteSource()


@pytest.fixture
def mongo_error():
    return PyMongoError("connection reset")
