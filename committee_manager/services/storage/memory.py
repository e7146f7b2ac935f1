"""
In-Memory Document Store

Used by tests and for running without a configured backend.
Documents are deep-copied on the way in and out so callers can never
mutate stored state through a shared reference.
"""

import asyncio
import copy
from typing import Optional

from committee_manager.services.storage.interface import (
    Document,
    DocumentStore,
    NotFoundError,
)


class InMemoryDocumentStore(DocumentStore):
    """Dictionary-backed implementation of the document store."""

    def __init__(self, initial: Optional[dict[str, dict[str, Document]]] = None):
        self._collections: dict[str, dict[str, Document]] = copy.deepcopy(initial or {})

    async def get(self, collection: str, doc_id: str) -> Optional[Document]:
        await asyncio.sleep(0)
        doc = self._collections.get(collection, {}).get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def get_all(self, collection: str) -> list[Document]:
        await asyncio.sleep(0)
        return [
            {**copy.deepcopy(doc), "id": doc_id}
            for doc_id, doc in self._collections.get(collection, {}).items()
        ]

    async def set(
        self,
        collection: str,
        doc_id: str,
        data: Document,
        merge: bool = False,
    ) -> None:
        await asyncio.sleep(0)
        docs = self._collections.setdefault(collection, {})
        if merge and doc_id in docs:
            docs[doc_id] = {**docs[doc_id], **copy.deepcopy(data)}
        else:
            docs[doc_id] = copy.deepcopy(data)

    async def update(self, collection: str, doc_id: str, fields: Document) -> None:
        await asyncio.sleep(0)
        docs = self._collections.get(collection, {})
        if doc_id not in docs:
            raise NotFoundError(f"{collection}/{doc_id} not found")
        docs[doc_id] = {**docs[doc_id], **copy.deepcopy(fields)}

    async def delete(self, collection: str, doc_id: str) -> bool:
        await asyncio.sleep(0)
        return self._collections.get(collection, {}).pop(doc_id, None) is not None

    def dump(self) -> dict[str, dict[str, Document]]:
        """Synchronous snapshot of everything stored (for debugging and tests)."""
        return copy.deepcopy(self._collections)
