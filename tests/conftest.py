"""Shared fixtures: an in-memory document store and a controllable clock."""

import copy
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import uuid4

import pytest

from videochat.application.services.storage import VideoStorageService
from videochat.commons.infrastructure.documentdb.base import DocumentDBBase
from videochat.commons.settings.models import DocumentDBSettings, QueueSettings
from videochat.domain.models.video import VideoMetadata
from videochat.infrastructure.queue.document_queue import DocumentJobQueue


def _compare(op: str, value: Any, operand: Any, present: bool) -> bool:
    if op == "$exists":
        return present == bool(operand)
    if op == "$in":
        return value in operand
    if value is None:
        return False
    if op == "$lt":
        return value < operand
    if op == "$lte":
        return value <= operand
    if op == "$gt":
        return value > operand
    if op == "$gte":
        return value >= operand
    raise ValueError(f"Unsupported operator in fake store: {op}")


def matches(document: dict[str, Any], filters: dict[str, Any]) -> bool:
    """Evaluate the filter subset the stores and the queue use."""
    for key, condition in filters.items():
        if key == "$or":
            if not any(matches(document, f) for f in condition):
                return False
            continue
        if key == "$and":
            if not all(matches(document, f) for f in condition):
                return False
            continue

        present = key in document
        value = document.get(key)
        if isinstance(condition, dict) and condition and all(
            k.startswith("$") for k in condition
        ):
            for op, operand in condition.items():
                if not _compare(op, value, operand, present):
                    return False
        elif value != condition:
            return False
    return True


class InMemoryDocumentDB(DocumentDBBase):
    """Dict-backed DocumentDBBase used in place of MongoDB in unit tests."""

    def __init__(self) -> None:
        self.collections: dict[str, list[dict[str, Any]]] = {}
        self.indexes: dict[str, list[list[tuple[str, int]]]] = {}
        self.closed = False

    def _docs(self, collection: str) -> list[dict[str, Any]]:
        return self.collections.setdefault(collection, [])

    @staticmethod
    def _sorted(
        docs: list[dict[str, Any]], sort: list[tuple[str, int]] | None
    ) -> list[dict[str, Any]]:
        result = list(docs)
        for field, direction in reversed(sort or []):
            result.sort(key=lambda d: d.get(field), reverse=direction < 0)
        return result

    async def insert(self, collection: str, document: dict[str, Any]) -> str:
        doc = copy.deepcopy(document)
        doc.setdefault("id", str(uuid4()))
        if any(d["id"] == doc["id"] for d in self._docs(collection)):
            raise KeyError(f"duplicate id {doc['id']}")
        self._docs(collection).append(doc)
        return str(doc["id"])

    async def insert_many(
        self, collection: str, documents: list[dict[str, Any]]
    ) -> list[str]:
        return [await self.insert(collection, d) for d in documents]

    async def find_by_id(
        self, collection: str, document_id: str
    ) -> dict[str, Any] | None:
        for doc in self._docs(collection):
            if doc["id"] == document_id:
                return copy.deepcopy(doc)
        return None

    async def find(
        self,
        collection: str,
        filters: dict[str, Any],
        skip: int = 0,
        limit: int | None = None,
        sort: list[tuple[str, int]] | None = None,
    ) -> list[dict[str, Any]]:
        found = [d for d in self._docs(collection) if matches(d, filters)]
        found = self._sorted(found, sort)[skip:]
        if limit is not None:
            found = found[:limit]
        return copy.deepcopy(found)

    async def find_one(
        self, collection: str, filters: dict[str, Any]
    ) -> dict[str, Any] | None:
        found = await self.find(collection, filters, limit=1)
        return found[0] if found else None

    async def find_one_and_update(
        self,
        collection: str,
        filters: dict[str, Any],
        updates: dict[str, Any],
        sort: list[tuple[str, int]] | None = None,
        increments: dict[str, int] | None = None,
    ) -> dict[str, Any] | None:
        candidates = [d for d in self._docs(collection) if matches(d, filters)]
        if not candidates:
            return None
        target = self._sorted(candidates, sort)[0]
        target.update(copy.deepcopy(updates))
        for field, amount in (increments or {}).items():
            target[field] = target.get(field, 0) + amount
        return copy.deepcopy(target)

    async def update(
        self, collection: str, document_id: str, updates: dict[str, Any]
    ) -> bool:
        for doc in self._docs(collection):
            if doc["id"] == document_id:
                doc.update({k: v for k, v in copy.deepcopy(updates).items() if k != "id"})
                return True
        return False

    async def delete_many(self, collection: str, filters: dict[str, Any]) -> int:
        docs = self._docs(collection)
        keep = [d for d in docs if not matches(d, filters)]
        removed = len(docs) - len(keep)
        self.collections[collection] = keep
        return removed

    async def count(
        self, collection: str, filters: dict[str, Any] | None = None
    ) -> int:
        return len([d for d in self._docs(collection) if matches(d, filters or {})])

    async def create_index(
        self,
        collection: str,
        fields: list[tuple[str, int]],
        unique: bool = False,
        name: str | None = None,
    ) -> str:
        self.indexes.setdefault(collection, []).append(fields)
        return name or "_".join(f"{f}_{d}" for f, d in fields)

    async def close(self) -> None:
        self.closed = True


class FakeClock:
    """Manually advanced UTC clock for lease tests."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def document_db() -> InMemoryDocumentDB:
    return InMemoryDocumentDB()


@pytest.fixture
def doc_settings() -> DocumentDBSettings:
    return DocumentDBSettings()


@pytest.fixture
def storage(document_db, doc_settings) -> VideoStorageService:
    return VideoStorageService(document_db, doc_settings)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def queue_settings() -> QueueSettings:
    return QueueSettings(lease_seconds=60, poll_interval_seconds=0.01)


@pytest.fixture
def job_queue(document_db, doc_settings, queue_settings, clock) -> DocumentJobQueue:
    return DocumentJobQueue(
        document_db,
        doc_settings.collections.jobs,
        settings=queue_settings,
        clock=clock,
    )


@pytest.fixture
def make_video():
    """Build a VideoMetadata with overridable fields."""

    def _make(**overrides: Any) -> VideoMetadata:
        fields: dict[str, Any] = {
            "title": "Intro to Queues",
            "source_url": "https://media.example.com/videos/intro.mp4",
            "duration_seconds": 600,
        }
        fields.update(overrides)
        return VideoMetadata(**fields)

    return _make


@pytest.fixture
async def saved_video(storage, make_video) -> VideoMetadata:
    video = make_video()
    await storage.save_video(video)
    return video
