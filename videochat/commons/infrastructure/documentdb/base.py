"""Abstract base class for document database operations."""

from abc import ABC, abstractmethod
from typing import Any


class DocumentDBBase(ABC):
    """Abstract base class for document database operations.

    Documents expose their identifier as ``id``; providers map it to their
    native primary key. Filters use MongoDB query syntax restricted to
    equality, ``$in``, ``$lt``, ``$lte``, ``$gt``, ``$gte``, ``$exists``,
    ``$or`` and ``$and``.
    """

    @abstractmethod
    async def insert(
        self,
        collection: str,
        document: dict[str, Any],
    ) -> str:
        """Insert a document.

        Args:
            collection: Collection name.
            document: Document to insert.

        Returns:
            Generated document ID.
        """

    @abstractmethod
    async def insert_many(
        self,
        collection: str,
        documents: list[dict[str, Any]],
    ) -> list[str]:
        """Insert multiple documents.

        Args:
            collection: Collection name.
            documents: List of documents to insert.

        Returns:
            List of generated document IDs.
        """

    @abstractmethod
    async def find_by_id(
        self,
        collection: str,
        document_id: str,
    ) -> dict[str, Any] | None:
        """Find a document by ID.

        Returns:
            Document if found, None otherwise.
        """

    @abstractmethod
    async def find(
        self,
        collection: str,
        filters: dict[str, Any],
        skip: int = 0,
        limit: int | None = None,
        sort: list[tuple[str, int]] | None = None,
    ) -> list[dict[str, Any]]:
        """Find documents matching filters.

        Args:
            collection: Collection name.
            filters: Query filters.
            skip: Number of documents to skip.
            limit: Maximum documents to return, None for no limit.
            sort: Sort specification [(field, direction)].
                  Direction: 1 for ascending, -1 for descending.

        Returns:
            List of matching documents.
        """

    @abstractmethod
    async def find_one(
        self,
        collection: str,
        filters: dict[str, Any],
    ) -> dict[str, Any] | None:
        """Find a single document matching filters."""

    @abstractmethod
    async def find_one_and_update(
        self,
        collection: str,
        filters: dict[str, Any],
        updates: dict[str, Any],
        sort: list[tuple[str, int]] | None = None,
        increments: dict[str, int] | None = None,
    ) -> dict[str, Any] | None:
        """Atomically update the first matching document.

        This is the claim primitive of the job queue: two concurrent callers
        never receive the same document for the same filter.

        Args:
            collection: Collection name.
            filters: Query filters.
            updates: Fields to set.
            sort: Which document wins when several match.
            increments: Numeric fields to increment.

        Returns:
            The document after the update, or None if nothing matched.
        """

    @abstractmethod
    async def update(
        self,
        collection: str,
        document_id: str,
        updates: dict[str, Any],
    ) -> bool:
        """Update a document.

        Returns:
            True if updated, False if not found.
        """

    @abstractmethod
    async def delete_many(
        self,
        collection: str,
        filters: dict[str, Any],
    ) -> int:
        """Delete multiple documents.

        Returns:
            Count of deleted documents.
        """

    @abstractmethod
    async def count(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
    ) -> int:
        """Count documents matching filters."""

    @abstractmethod
    async def create_index(
        self,
        collection: str,
        fields: list[tuple[str, int]],
        unique: bool = False,
        name: str | None = None,
    ) -> str:
        """Create an index on the collection.

        Returns:
            Index name.
        """

    async def close(self) -> None:  # noqa: B027
        """Release client resources."""
