"""Tests for the document store implementations."""

import asyncio
import json

import pytest

from committee_manager.services.storage import (
    GoogleSheetsDocumentStore,
    InMemoryDocumentStore,
    NotFoundError,
)
from committee_manager.services.storage.google_sheets import DOCUMENT_COLUMNS


class FakeWorksheet:
    """Just enough of gspread.Worksheet for the document store."""

    def __init__(self):
        self.rows = [list(DOCUMENT_COLUMNS)]

    def get_all_values(self):
        return [list(row) for row in self.rows]

    def append_row(self, row, value_input_option=None):
        self.rows.append([str(value) for value in row])

    def update_cell(self, row, col, value):
        self.rows[row - 1][col - 1] = str(value)

    def delete_rows(self, index):
        del self.rows[index - 1]


class FakeSheetsClient:
    def __init__(self):
        self.sheets = {}

    def get_collection_sheet(self, collection):
        return self.sheets.setdefault(collection, FakeWorksheet())


@pytest.fixture(params=["memory", "sheets"])
def doc_store(request):
    if request.param == "memory":
        return InMemoryDocumentStore()
    return GoogleSheetsDocumentStore(FakeSheetsClient())


class TestDocumentStoreContract:
    """Both implementations behave the same."""

    def test_set_and_get(self, doc_store):
        asyncio.run(doc_store.set("committees", "c1", {"title": "Pool", "member_ids": ["a"]}))
        doc = asyncio.run(doc_store.get("committees", "c1"))
        assert doc["title"] == "Pool"
        assert doc["member_ids"] == ["a"]

    def test_get_missing_returns_none(self, doc_store):
        assert asyncio.run(doc_store.get("committees", "nope")) is None

    def test_get_all_includes_ids(self, doc_store):
        asyncio.run(doc_store.set("members", "m1", {"name": "A"}))
        asyncio.run(doc_store.set("members", "m2", {"name": "B"}))
        docs = asyncio.run(doc_store.get_all("members"))
        assert sorted(d["id"] for d in docs) == ["m1", "m2"]

    def test_merge_keeps_other_fields(self, doc_store):
        asyncio.run(doc_store.set("settings", "app", {"app_pin": "1234", "language": "en"}))
        asyncio.run(doc_store.set("settings", "app", {"language": "ur"}, merge=True))
        doc = asyncio.run(doc_store.get("settings", "app"))
        assert doc["app_pin"] == "1234"
        assert doc["language"] == "ur"

    def test_set_without_merge_replaces(self, doc_store):
        asyncio.run(doc_store.set("settings", "app", {"app_pin": "1234", "language": "en"}))
        asyncio.run(doc_store.set("settings", "app", {"language": "ur"}))
        doc = asyncio.run(doc_store.get("settings", "app"))
        assert "app_pin" not in doc

    def test_update_replaces_whole_field(self, doc_store):
        asyncio.run(doc_store.set("committees", "c1", {"payments": [{"id": "p1"}], "title": "Pool"}))
        asyncio.run(doc_store.update("committees", "c1", {"payments": [{"id": "p1"}, {"id": "p2"}]}))
        doc = asyncio.run(doc_store.get("committees", "c1"))
        assert [p["id"] for p in doc["payments"]] == ["p1", "p2"]
        assert doc["title"] == "Pool"

    def test_update_missing_raises(self, doc_store):
        with pytest.raises(NotFoundError):
            asyncio.run(doc_store.update("committees", "missing", {"title": "x"}))

    def test_delete(self, doc_store):
        asyncio.run(doc_store.set("members", "m1", {"name": "A"}))
        assert asyncio.run(doc_store.delete("members", "m1")) is True
        assert asyncio.run(doc_store.delete("members", "m1")) is False
        assert asyncio.run(doc_store.get_all("members")) == []


class TestInMemoryIsolation:
    def test_returned_documents_are_copies(self):
        store = InMemoryDocumentStore()
        asyncio.run(store.set("committees", "c1", {"member_ids": ["a"]}))
        doc = asyncio.run(store.get("committees", "c1"))
        doc["member_ids"].append("b")
        assert store.dump()["committees"]["c1"]["member_ids"] == ["a"]


class TestGoogleSheetsRows:
    def test_row_layout(self):
        client = FakeSheetsClient()
        store = GoogleSheetsDocumentStore(client)
        asyncio.run(store.set("members", "m1", {"id": "m1", "name": "Ahmed"}))

        row = client.sheets["members"].rows[1]
        assert row[0] == "m1"
        assert json.loads(row[1]) == {"name": "Ahmed"}
        assert row[2]

    def test_malformed_rows_skipped(self):
        client = FakeSheetsClient()
        store = GoogleSheetsDocumentStore(client)
        sheet = client.get_collection_sheet("members")
        sheet.rows.append(["m1", "{broken", ""])
        sheet.rows.append(["", "", ""])
        sheet.rows.append(["m3", "[1]", ""])
        sheet.rows.append(["m2", json.dumps({"name": "B"}), ""])

        docs = asyncio.run(store.get_all("members"))
        assert docs == [{"name": "B", "id": "m2"}]
