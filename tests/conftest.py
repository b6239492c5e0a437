import copy

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from pymongo import _csot
from pymongo.errors import ServerSelectionTimeoutError
from pymongo.results import InsertOneResult

from eventlog.main import app
from eventlog.repository import EventLogRepository


class FakeCursor:
    def __init__(self, docs):
        self._docs = docs
        self.closed = False

    def __iter__(self):
        return iter(self._docs)

    def close(self):
        self.closed = True


class FakeCollection:
    """In-memory stand-in for a pymongo Collection (only what the repository uses)."""

    def __init__(self):
        self.docs = []
        self.fail = False
        self.calls = 0
        self.cursors = []
        self.timeouts = []
        self.insert_error = None

    def _check(self):
        self.calls += 1
        self.timeouts.append(_csot.get_timeout())
        if self.fail:
            raise ServerSelectionTimeoutError("No servers found yet")

    def find_one(self, flt):
        self._check()
        for doc in self.docs:
            if all(doc.get(k) == v for k, v in flt.items()):
                return copy.deepcopy(doc)
        return None

    def find(self, flt):
        self._check()
        cursor = FakeCursor([copy.deepcopy(d) for d in self.docs
                             if all(d.get(k) == v for k, v in flt.items())])
        self.cursors.append(cursor)
        return cursor

    def insert_one(self, doc):
        self._check()
        if self.insert_error is not None:
            raise self.insert_error
        doc = copy.deepcopy(doc)
        doc.setdefault("_id", ObjectId())
        self.docs.append(doc)
        return InsertOneResult(doc["_id"], True)

    def count_documents(self, flt):
        return len(self.docs)


@pytest.fixture
def collection():
    return FakeCollection()


@pytest.fixture
def repository(collection):
    return EventLogRepository(collection)


@pytest.fixture
def client(repository):
    app.state.repository = repository
    yield TestClient(app)
    app.state.repository = None
