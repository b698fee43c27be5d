"""Document database abstractions and implementations."""

from videochat.commons.infrastructure.documentdb.base import DocumentDBBase
from videochat.commons.infrastructure.documentdb.mongodb_provider import (
    MongoDBDocumentDB,
)

__all__ = [
    # Base classes
    "DocumentDBBase",
    # Implementations
    "MongoDBDocumentDB",
]
