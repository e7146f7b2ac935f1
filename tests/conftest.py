"""
Shared fixtures.

Test strategy:
1. Pure components (turns, deriver, validators, timer) are tested directly
2. Ledgers run against InMemoryDocumentStore through asyncio.run
3. Store failures come from FailingStore; no test touches the network
"""

import random

import pytest

from committee_manager.agents import CommitteeSummaryAgent
from committee_manager.config import AppSettings
from committee_manager.orchestrator import create_app_components
from committee_manager.services.storage import InMemoryDocumentStore, StorageError


class FakeClock:
    """Monotonic clock moved by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FailingStore(InMemoryDocumentStore):
    """In-memory store whose reads or writes can be switched to fail."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.fail_reads = False
        self.fail_writes = False

    async def get(self, collection, doc_id):
        if self.fail_reads:
            raise StorageError("read refused")
        return await super().get(collection, doc_id)

    async def get_all(self, collection):
        if self.fail_reads:
            raise StorageError("read refused")
        return await super().get_all(collection)

    async def set(self, collection, doc_id, data, merge=False):
        if self.fail_writes:
            raise StorageError("write refused")
        await super().set(collection, doc_id, data, merge)

    async def update(self, collection, doc_id, fields):
        if self.fail_writes:
            raise StorageError("write refused")
        await super().update(collection, doc_id, fields)

    async def delete(self, collection, doc_id):
        if self.fail_writes:
            raise StorageError("write refused")
        return await super().delete(collection, doc_id)


@pytest.fixture(autouse=True)
def no_gemini_key(monkeypatch):
    """Keep every test offline."""
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return FailingStore()


@pytest.fixture
def app_settings():
    return AppSettings()


@pytest.fixture
def app(store, clock, app_settings):
    """Fully wired components over a FailingStore, seeded RNG and fake clock."""
    return create_app_components(
        store=store,
        use_storage=False,
        settings=app_settings,
        summary_agent=CommitteeSummaryAgent(settings=None),
        rng=random.Random(42),
        clock=clock,
    )
