"""
Storage Services Package

Provides the abstract document store interface and its implementations.
Google Sheets is the hosted backend; the in-memory store serves tests and
offline use.
"""

from committee_manager.services.storage.interface import (
    ConnectionError,
    Document,
    DocumentStore,
    NotFoundError,
    StorageError,
)
from committee_manager.services.storage.memory import InMemoryDocumentStore
from committee_manager.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsDocumentStore,
)

__all__ = [
    # Interface
    "Document",
    "DocumentStore",
    # Exceptions
    "ConnectionError",
    "NotFoundError",
    "StorageError",
    # Implementations
    "GoogleSheetsClient",
    "GoogleSheetsDocumentStore",
    "InMemoryDocumentStore",
]
