"""MongoDB implementation of document database."""

from typing import Any

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ReturnDocument

from videochat.commons.infrastructure.documentdb.base import DocumentDBBase


def _to_mongo(document: dict[str, Any]) -> dict[str, Any]:
    """Copy a document, moving the domain 'id' into MongoDB's '_id'."""
    doc = document.copy()
    if "id" in doc:
        doc["_id"] = doc.pop("id")
    return doc


def _from_mongo(document: dict[str, Any]) -> dict[str, Any]:
    """Restore the domain 'id' field from '_id'."""
    doc = dict(document)
    doc["id"] = str(doc.pop("_id"))
    return doc


def _translate_filters(filters: dict[str, Any]) -> dict[str, Any]:
    """Rewrite 'id' keys in a filter to '_id', including inside $or/$and."""
    translated: dict[str, Any] = {}
    for key, value in filters.items():
        if key in ("$or", "$and"):
            translated[key] = [_translate_filters(f) for f in value]
        elif key == "id":
            translated["_id"] = value
        else:
            translated[key] = value
    return translated


class MongoDBDocumentDB(DocumentDBBase):
    """MongoDB implementation of document database.

    Uses Motor for async operations. Domain documents carry string UUIDs
    which are stored directly as ``_id``. The client is timezone aware so
    queue lease timestamps round-trip as UTC datetimes.
    """

    def __init__(
        self,
        connection_string: str,
        database_name: str,
    ) -> None:
        """Initialize MongoDB client.

        Args:
            connection_string: MongoDB connection URI.
            database_name: Name of the database to use.
        """
        self._client: AsyncIOMotorClient[dict[str, Any]] = AsyncIOMotorClient(
            connection_string, tz_aware=True
        )
        self._db: AsyncIOMotorDatabase[dict[str, Any]] = self._client[database_name]
        self._database_name = database_name

    async def insert(
        self,
        collection: str,
        document: dict[str, Any],
    ) -> str:
        """Insert a document, using its 'id' as '_id' when present."""
        result = await self._db[collection].insert_one(_to_mongo(document))
        return str(result.inserted_id)

    async def insert_many(
        self,
        collection: str,
        documents: list[dict[str, Any]],
    ) -> list[str]:
        """Insert multiple documents in order."""
        if not documents:
            return []

        docs = [_to_mongo(document) for document in documents]
        result = await self._db[collection].insert_many(docs, ordered=True)
        return [str(id_) for id_ in result.inserted_ids]

    async def find_by_id(
        self,
        collection: str,
        document_id: str,
    ) -> dict[str, Any] | None:
        """Find a document by its string '_id'."""
        doc = await self._db[collection].find_one({"_id": document_id})
        return _from_mongo(doc) if doc else None

    async def find(
        self,
        collection: str,
        filters: dict[str, Any],
        skip: int = 0,
        limit: int | None = None,
        sort: list[tuple[str, int]] | None = None,
    ) -> list[dict[str, Any]]:
        """Find documents matching filters."""
        cursor = self._db[collection].find(_translate_filters(filters))

        if sort:
            cursor = cursor.sort(sort)

        cursor = cursor.skip(skip)
        if limit is not None:
            cursor = cursor.limit(limit)

        return [_from_mongo(doc) async for doc in cursor]

    async def find_one(
        self,
        collection: str,
        filters: dict[str, Any],
    ) -> dict[str, Any] | None:
        """Find a single document matching filters."""
        doc = await self._db[collection].find_one(_translate_filters(filters))
        return _from_mongo(doc) if doc else None

    async def find_one_and_update(
        self,
        collection: str,
        filters: dict[str, Any],
        updates: dict[str, Any],
        sort: list[tuple[str, int]] | None = None,
        increments: dict[str, int] | None = None,
    ) -> dict[str, Any] | None:
        """Atomically update the first matching document and return it."""
        update_doc: dict[str, Any] = {"$set": updates}
        if increments:
            update_doc["$inc"] = increments

        doc = await self._db[collection].find_one_and_update(
            _translate_filters(filters),
            update_doc,
            sort=sort,
            return_document=ReturnDocument.AFTER,
        )
        return _from_mongo(doc) if doc else None

    async def update(
        self,
        collection: str,
        document_id: str,
        updates: dict[str, Any],
    ) -> bool:
        """Update a document by its string '_id'."""
        update_doc = updates.copy()
        update_doc.pop("id", None)  # '_id' is immutable in MongoDB

        result = await self._db[collection].update_one(
            {"_id": document_id},
            {"$set": update_doc},
        )
        return bool(result.matched_count > 0)

    async def delete_many(
        self,
        collection: str,
        filters: dict[str, Any],
    ) -> int:
        """Delete multiple documents."""
        result = await self._db[collection].delete_many(_translate_filters(filters))
        return int(result.deleted_count)

    async def count(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
    ) -> int:
        """Count documents matching filters."""
        if filters:
            count = await self._db[collection].count_documents(
                _translate_filters(filters)
            )
            return int(count)
        count = await self._db[collection].estimated_document_count()
        return int(count)

    async def create_index(
        self,
        collection: str,
        fields: list[tuple[str, int]],
        unique: bool = False,
        name: str | None = None,
    ) -> str:
        """Create an index on the collection."""
        kwargs: dict[str, Any] = {"unique": unique}
        if name:
            kwargs["name"] = name
        index_name = await self._db[collection].create_index(fields, **kwargs)
        return str(index_name)

    async def close(self) -> None:
        """Close the client connection."""
        self._client.close()
