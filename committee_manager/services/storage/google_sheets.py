"""
Google Sheets Document Store

DESIGN DECISION: Google Sheets is used as the hosted backend because:
1. The shop owner can look at the raw data directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)
4. Easy to export/migrate later

Every collection is one worksheet. Each document is one row:
    id | document_json | updated_at

TRADEOFFS:
- No transactions: a document is always written as a whole row, so a
  list-shaped field (payments, member_ids, payout_turns) is replaced as a
  whole array, never appended cell by cell
- Limited query capabilities (we filter in Python)
"""

import json
from datetime import datetime
from typing import Optional

import gspread
from google.oauth2.service_account import Credentials
from tenacity import (
    retry,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from committee_manager.config import get_settings
from committee_manager.services.storage.interface import (
    ConnectionError,
    Document,
    DocumentStore,
    NotFoundError,
    StorageError,
)


DOCUMENT_COLUMNS = [
    "id",
    "document_json",
    "updated_at",
]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._worksheets: dict[str, gspread.Worksheet] = {}
        self._settings = get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_collection_sheet(self, collection: str) -> gspread.Worksheet:
        """Get or create the worksheet holding one collection."""
        if collection in self._worksheets:
            return self._worksheets[collection]

        title = f"{self._settings.worksheet_prefix}{collection}"
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=self._settings.rows_per_sheet,
                cols=len(DOCUMENT_COLUMNS),
            )
            sheet.append_row(DOCUMENT_COLUMNS)
        self._worksheets[collection] = sheet
        return sheet


class GoogleSheetsDocumentStore(DocumentStore):
    """
    Google Sheets implementation of the document store.

    Documents are JSON-serialized into a single cell.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _document_to_row(self, doc_id: str, data: Document) -> list:
        """Convert a document to a spreadsheet row."""
        body = {k: v for k, v in data.items() if k != "id"}
        return [
            doc_id,
            json.dumps(body, ensure_ascii=False),
            datetime.now().isoformat(),
        ]

    def _row_to_document(self, row: list) -> Document:
        """Convert a spreadsheet row to a document (with its id)."""
        body = json.loads(row[1]) if len(row) > 1 and row[1] else {}
        if not isinstance(body, dict):
            raise ValueError(f"Row {row[0]} does not hold a JSON object")
        return {**body, "id": row[0]}

    def _find_row(self, sheet: gspread.Worksheet, doc_id: str) -> tuple[Optional[int], Optional[list]]:
        """Return (1-based row number, row values) for a document id."""
        all_rows = sheet.get_all_values()
        for idx, row in enumerate(all_rows[1:], start=2):  # Row 1 is the header
            if row and row[0] == doc_id:
                return idx, row
        return None, None

    def _write_row(self, sheet: gspread.Worksheet, row_number: int, row: list) -> None:
        for col_idx, value in enumerate(row, start=1):
            sheet.update_cell(row_number, col_idx, value)

    async def get(self, collection: str, doc_id: str) -> Optional[Document]:
        """Fetch one document."""
        try:
            sheet = self._client.get_collection_sheet(collection)
            _, row = self._find_row(sheet, doc_id)
            return self._row_to_document(row) if row else None
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to read {collection}/{doc_id}: {e}")

    async def get_all(self, collection: str) -> list[Document]:
        """Fetch every document of a collection, skipping malformed rows."""
        try:
            sheet = self._client.get_collection_sheet(collection)
            all_rows = sheet.get_all_values()[1:]  # Skip header

            documents = []
            for row in all_rows:
                if not row or not row[0]:  # Skip empty rows
                    continue
                try:
                    documents.append(self._row_to_document(row))
                except ValueError:  # JSONDecodeError included
                    continue
            return documents
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to list {collection}: {e}")

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def set(
        self,
        collection: str,
        doc_id: str,
        data: Document,
        merge: bool = False,
    ) -> None:
        """Write a whole document, or merge top-level fields into it."""
        try:
            sheet = self._client.get_collection_sheet(collection)
            row_number, row = self._find_row(sheet, doc_id)

            if row_number is None:
                sheet.append_row(self._document_to_row(doc_id, data), value_input_option="RAW")
                return

            if merge:
                data = {**self._row_to_document(row), **data}
            self._write_row(sheet, row_number, self._document_to_row(doc_id, data))
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to write {collection}/{doc_id}: {e}")

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_not_exception_type(NotFoundError),
        reraise=True,
    )
    async def update(self, collection: str, doc_id: str, fields: Document) -> None:
        """Overwrite some fields of an existing document."""
        try:
            sheet = self._client.get_collection_sheet(collection)
            row_number, row = self._find_row(sheet, doc_id)
            if row_number is None:
                raise NotFoundError(f"{collection}/{doc_id} not found")

            merged = {**self._row_to_document(row), **fields}
            self._write_row(sheet, row_number, self._document_to_row(doc_id, merged))
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to update {collection}/{doc_id}: {e}")

    async def delete(self, collection: str, doc_id: str) -> bool:
        """Delete a document row."""
        try:
            sheet = self._client.get_collection_sheet(collection)
            row_number, _ = self._find_row(sheet, doc_id)
            if row_number is None:
                return False
            sheet.delete_rows(row_number)
            return True
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to delete {collection}/{doc_id}: {e}")
