"""
Abstract Document Store Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap Google Sheets for another document database later
2. Use in-memory storage for testing
3. Keep ledger logic decoupled from storage implementation

The store is organised as named collections (committees, members,
installments, settings, audit). Each record is one JSON-compatible
document addressed by its id. Two write styles are supported:
- whole-document overwrite (`set`) for entities and list-shaped fields
- partial-field merge (`set(..., merge=True)` / `update`) for settings
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


Document = dict[str, Any]


class DocumentStore(ABC):
    """
    Abstract interface for document storage.

    Every method is a coroutine; callers must await the outcome before
    touching local state.
    """

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> Optional[Document]:
        """
        Fetch one document.

        Returns:
            The document if found, None otherwise

        Raises:
            StorageError: If the store cannot be read
        """
        pass

    @abstractmethod
    async def get_all(self, collection: str) -> list[Document]:
        """
        Fetch every document of a collection.

        Each returned document carries its id under the "id" key.
        """
        pass

    @abstractmethod
    async def set(
        self,
        collection: str,
        doc_id: str,
        data: Document,
        merge: bool = False,
    ) -> None:
        """
        Write a document.

        Args:
            collection: Collection name
            doc_id: Document id
            data: Document body
            merge: If True, only the given top-level fields are overwritten
                   and the document is created when missing

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def update(self, collection: str, doc_id: str, fields: Document) -> None:
        """
        Overwrite some top-level fields of an existing document.

        List-shaped fields are always replaced as a whole array.

        Raises:
            NotFoundError: If the document doesn't exist
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def delete(self, collection: str, doc_id: str) -> bool:
        """
        Delete a document.

        Returns:
            True if a document was deleted, False if it didn't exist
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Document not found in storage."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
