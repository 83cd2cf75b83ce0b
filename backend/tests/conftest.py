"""Shared fixtures: an in-memory stand-in for the Firestore client surface the seeder uses."""
from __future__ import annotations

import copy
import uuid
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from firebase_admin import firestore
from google.api_core.exceptions import AlreadyExists


def _resolve(data: dict) -> dict:
    now = datetime.now(timezone.utc)
    return {key: (now if value is firestore.SERVER_TIMESTAMP else value) for key, value in data.items()}


class FakeSnapshot:
    def __init__(self, doc_id: str, data: dict | None) -> None:
        self.id = doc_id
        self._data = data

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self) -> dict | None:
        return copy.deepcopy(self._data) if self._data is not None else None


class FakeDocumentRef:
    def __init__(self, client: "FakeFirestore", collection: str, doc_id: str) -> None:
        self._client = client
        self._collection = collection
        self.id = doc_id

    @property
    def _docs(self) -> dict:
        return self._client.data.setdefault(self._collection, {})

    def get(self) -> FakeSnapshot:
        return FakeSnapshot(self.id, self._client.data.get(self._collection, {}).get(self.id))

    def set(self, data: dict, merge: bool = False) -> None:
        resolved = _resolve(data)
        if merge and self.id in self._docs:
            self._docs[self.id].update(resolved)
        else:
            self._docs[self.id] = resolved

    def create(self, data: dict) -> None:
        if self.id in self._client.data.get(self._collection, {}):
            raise AlreadyExists(f"Document already exists: {self._collection}/{self.id}")
        self._docs[self.id] = _resolve(data)


class FakeCollection:
    def __init__(self, client: "FakeFirestore", name: str) -> None:
        self._client = client
        self.id = name

    def document(self, doc_id: str | None = None) -> FakeDocumentRef:
        return FakeDocumentRef(self._client, self.id, doc_id or uuid.uuid4().hex[:20])

    def stream(self):
        for doc_id, data in list(self._client.data.get(self.id, {}).items()):
            yield FakeSnapshot(doc_id, copy.deepcopy(data))


class FakeBatch:
    def __init__(self, client: "FakeFirestore") -> None:
        self._client = client
        self._writes: list[tuple[FakeDocumentRef, dict, bool]] = []

    def set(self, ref: FakeDocumentRef, data: dict, merge: bool = False) -> None:
        self._writes.append((ref, data, merge))

    def commit(self) -> None:
        if self._client.commit_error is not None:
            raise self._client.commit_error
        for ref, data, merge in self._writes:
            ref.set(data, merge=merge)
        self._client.commits += 1


class FakeFirestore:
    project = "test-project"

    def __init__(self) -> None:
        self.data: dict[str, dict[str, dict]] = {}
        self.commit_error: Exception | None = None
        self.commits = 0

    def collection(self, name: str) -> FakeCollection:
        return FakeCollection(self, name)

    def collections(self):
        return [FakeCollection(self, name) for name, docs in self.data.items() if docs]

    def batch(self) -> FakeBatch:
        return FakeBatch(self)


@pytest.fixture
def db() -> FakeFirestore:
    return FakeFirestore()


@pytest.fixture
def index_manager() -> MagicMock:
    return MagicMock(name="index_manager")
