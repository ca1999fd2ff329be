"""Tests for movement records and Trello action mapping."""

from datetime import datetime, timezone

import pytest

from trello_monitor.models.movement import (
    MovementRecord,
    actions_to_movements,
    format_timestamp,
    parse_timestamp,
)
from trello_monitor.utils.error_handling import MovementValidationError


class TestTimestamps:
    """Tests for timestamp parsing and formatting."""

    def test_parse_zulu(self):
        assert parse_timestamp("2024-03-14T12:00:00Z") == datetime(2024, 3, 14, 12, tzinfo=timezone.utc)

    def test_parse_naive_is_utc(self):
        assert parse_timestamp("2024-01-01") == datetime(2024, 1, 1, tzinfo=timezone.utc)

    def test_parse_short_fraction(self):
        assert parse_timestamp("2024-03-14T12:00:00.5Z") == datetime(
            2024, 3, 14, 12, 0, 0, 500000, tzinfo=timezone.utc
        )

    @pytest.mark.parametrize("value", ["", "yesterday", "2024-13-45T00:00:00Z", None])
    def test_parse_invalid(self, value):
        with pytest.raises(MovementValidationError):
            parse_timestamp(value)

    def test_format_millisecond_precision(self):
        value = datetime(2024, 3, 14, 13, 5, 9, 123456, tzinfo=timezone.utc)
        assert format_timestamp(value) == "2024-03-14T13:05:09.123Z"


class TestMovementRecord:
    """Tests for the MovementRecord model."""

    def test_identity(self):
        record = MovementRecord(
            cardName="Card", oldLocation="To Do", newLocation="Done", timestamp="2024-03-14T12:00:00Z"
        )
        assert record.identity == ("Card", "To Do", "Done", "2024-03-14T12:00:00Z")

    def test_from_row_pads_missing_cells(self):
        record = MovementRecord.from_row(["Card", "To Do"])

        assert record.card_name == "Card"
        assert record.new_location == ""
        assert record.timestamp == ""

    def test_row_round_trip(self):
        row = ["Card", "To Do", "Done", "2024-03-14T12:00:00.000Z"]
        assert MovementRecord.from_row(row).to_row() == row


class TestTrelloActionMapping:
    """Tests for mapping Trello actions to movements."""

    def test_list_change(self):
        action = {
            "type": "updateCard",
            "date": "2024-03-14T12:00:00.512Z",
            "data": {
                "card": {"name": "Write docs"},
                "listBefore": {"name": "To Do"},
                "listAfter": {"name": "Doing"},
            },
        }

        record = MovementRecord.from_trello_action(action)

        assert record == MovementRecord(
            card_name="Write docs",
            old_location="To Do",
            new_location="Doing",
            timestamp="2024-03-14T12:00:00.512Z",
        )

    def test_missing_list_becomes_not_available(self):
        actions = [
            {
                "type": "updateCard",
                "date": "2024-03-14T12:00:00+02:00",
                "data": {"card": {"name": "Card"}, "listAfter": {"name": "Done"}},
            }
        ]

        [record] = actions_to_movements(actions)

        assert record.old_location == "N/A"
        assert record.new_location == "Done"
        assert record.timestamp == "2024-03-14T10:00:00.000Z"

    def test_invalid_date_raises(self):
        with pytest.raises(MovementValidationError):
            MovementRecord.from_trello_action({"data": {"card": {"name": "x"}}, "date": "soon"})
