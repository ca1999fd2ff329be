"""Google Sheets movement sink."""

import logging
from pathlib import Path
from typing import Any, List, Optional, Sequence, Union

from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from .base import MovementSink
from ..models.movement import MOVEMENT_HEADERS, MovementRecord
from ..utils.error_handling import SinkError

logger = logging.getLogger(__name__)

SHEETS_SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


class GoogleSheetsMovementSink(MovementSink):
    """Stores movements in columns A:D of a Google Sheet."""

    def __init__(
        self,
        spreadsheet_id: str,
        credentials_file: Union[str, Path] = "credentials.json",
        sheet_name: str = "Sheet1",
        service: Optional[Any] = None,
    ):
        """Initialize Google Sheets sink.

        Args:
            spreadsheet_id: Target spreadsheet ID
            credentials_file: Service account key file
            sheet_name: Worksheet holding the movements
            service: Prebuilt Sheets API service (skips authentication)
        """
        if not spreadsheet_id:
            raise SinkError("Spreadsheet ID is required")

        self.spreadsheet_id = spreadsheet_id
        self.credentials_file = Path(credentials_file).expanduser()
        self.sheet_name = sheet_name
        self._service = service

    @property
    def name(self) -> str:
        return f"Google Sheet {self.spreadsheet_id}"

    @property
    def data_range(self) -> str:
        return f"{self.sheet_name}!A:D"

    def initialize(self) -> None:
        """Authenticate and build the Sheets API client once."""
        if self._service is not None:
            return

        try:
            credentials = service_account.Credentials.from_service_account_file(
                str(self.credentials_file),
                scopes=SHEETS_SCOPES,
            )
            self._service = build("sheets", "v4", credentials=credentials, cache_discovery=False)
        except (OSError, ValueError) as e:
            raise SinkError(f"Google Sheets initialization failed: {e}") from e

        logger.debug("Google Sheets client initialized from %s", self.credentials_file)

    def _values(self):
        self.initialize()
        return self._service.spreadsheets().values()

    def read_all(self) -> List[MovementRecord]:
        try:
            response = self._values().get(
                spreadsheetId=self.spreadsheet_id,
                range=self.data_range,
            ).execute()
        except HttpError as e:
            raise SinkError(f"Failed to read from Google Sheet: {e}") from e

        rows = response.get("values", [])
        # First row is the header
        return [
            MovementRecord.from_row(row)
            for row in rows[1:]
            if any(str(cell).strip() for cell in row)
        ]

    def write_all(self, movements: Sequence[MovementRecord]) -> None:
        values = [MOVEMENT_HEADERS] + [movement.to_row() for movement in movements]

        # Overwrite in place first; a failed update leaves the old rows intact
        try:
            sheet_values = self._values()
            sheet_values.update(
                spreadsheetId=self.spreadsheet_id,
                range=f"{self.sheet_name}!A1",
                valueInputOption="RAW",
                body={"values": values},
            ).execute()
            sheet_values.clear(
                spreadsheetId=self.spreadsheet_id,
                range=f"{self.sheet_name}!A{len(values) + 1}:D",
            ).execute()
        except HttpError as e:
            raise SinkError(f"Failed to write to Google Sheet: {e}") from e
