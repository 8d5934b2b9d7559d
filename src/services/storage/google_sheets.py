"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets can back the key-value store because:
1. The user can look at (and back up) their data directly in Sheets
2. No database setup required
3. The dashboard only ever stores two values

Layout: one worksheet with a header row and two columns, key | value.
A value longer than one cell allows spans several rows with the same key.

TRADEOFFS:
- Every write is a network round trip (fine: saves are fire-and-forget)
- No transactions: a multi-row value is rewritten row by row, so a write
  interrupted half way can leave a mix of old and new chunks until the
  next save
"""

from typing import Optional

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from src.config import get_settings
from src.services.storage.interface import (
    ConnectionError,
    KeyValueStore,
    StorageError,
)


STATE_COLUMNS = ["key", "value"]

# Sheets rejects cells over 50,000 characters.
CELL_CHUNK_SIZE = 45000


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
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

    def get_state_sheet(self) -> gspread.Worksheet:
        """Get or create the key/value worksheet."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self._settings.state_sheet_name)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(
                title=self._settings.state_sheet_name,
                rows=10,
                cols=len(STATE_COLUMNS),
            )
            sheet.append_row(STATE_COLUMNS)
        return sheet


class GoogleSheetsKeyValueStore(KeyValueStore):
    """
    Google Sheets implementation of the key-value store.

    A value is split across as many rows as it needs, CELL_CHUNK_SIZE
    characters each, all carrying the same key. Reading joins a key's rows
    in sheet order. Writing updates the key's existing rows in place,
    appends any extra chunks and deletes rows the new value no longer needs.
    """

    def __init__(
        self,
        client: Optional[GoogleSheetsClient] = None,
        chunk_size: int = CELL_CHUNK_SIZE,
    ):
        self._client = client or GoogleSheetsClient()
        self._chunk_size = chunk_size

    def _find_rows(self, sheet: gspread.Worksheet, key: str) -> list[tuple[int, list]]:
        """Return every (1-based row index, row) for a key, skipping the header."""
        return [
            (idx, row)
            for idx, row in enumerate(sheet.get_all_values()[1:], start=2)
            if row and row[0] == key
        ]

    def _chunks(self, value: str) -> list[str]:
        size = self._chunk_size
        return [value[i:i + size] for i in range(0, len(value), size)] or [""]

    async def get(self, key: str) -> Optional[str]:
        try:
            sheet = self._client.get_state_sheet()
            rows = self._find_rows(sheet, key)
        except Exception as e:
            raise StorageError(f"Failed to read {key!r}: {e}")

        if not rows:
            return None
        return "".join(row[1] if len(row) > 1 else "" for _, row in rows)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def set(self, key: str, value: str) -> None:
        chunks = self._chunks(value)
        try:
            sheet = self._client.get_state_sheet()
            existing = [idx for idx, _ in self._find_rows(sheet, key)]

            cells = [
                gspread.Cell(idx, 2, chunk)
                for idx, chunk in zip(existing, chunks)
            ]
            if cells:
                sheet.update_cells(cells, value_input_option="RAW")

            extra = chunks[len(existing):]
            if extra:
                sheet.append_rows(
                    [[key, chunk] for chunk in extra],
                    value_input_option="RAW",
                )

            # Bottom-up so earlier indices stay valid.
            for idx in reversed(existing[len(chunks):]):
                sheet.delete_rows(idx)
        except Exception as e:
            raise StorageError(f"Failed to write {key!r}: {e}")
