"""Movement sinks for Trello Monitor.

Provides durable destinations for card movements:
- CSV file (local)
- Google Sheets (remote)
"""

from .base import MovementSink
from .csv_sink import CsvMovementSink
from .sheets_sink import GoogleSheetsMovementSink

__all__ = [
    "MovementSink",
    "CsvMovementSink",
    "GoogleSheetsMovementSink",
]
