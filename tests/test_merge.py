"""Tests for the movement merge engine."""

import pytest

from trello_monitor.services.merge import MergeResult, merge_movements
from trello_monitor.utils.error_handling import MovementValidationError

from conftest import movement


RECORD_A = movement("A", "L1", "L2", "2024-03-14T12:00:00Z")
RECORD_B = movement("B", "L3", "L4", "2024-03-14T11:00:00Z")


class TestMergeMovements:
    """Tests for deduplication, ordering and idempotence."""

    def test_adds_only_new_records_in_order(self):
        result, added = merge_movements([RECORD_A], [RECORD_A, RECORD_B])

        assert added == 1
        assert result == [RECORD_B, RECORD_A]

    def test_duplicate_incoming_counted_once(self):
        duplicate = movement("A", "L1", "L2", "2024-03-14T12:00:00Z")

        result, added = merge_movements([], [RECORD_A, duplicate])

        assert added == 1
        assert result == [RECORD_A]

    def test_second_merge_is_a_no_op(self):
        first, added_first = merge_movements([RECORD_A], [RECORD_B])
        second, added_second = merge_movements(first, [RECORD_B])

        assert added_first == 1
        assert added_second == 0
        assert second is first

    def test_nothing_new_returns_existing_unchanged(self):
        existing = [RECORD_B, RECORD_A]

        result = merge_movements(existing, [])

        assert result == MergeResult(existing, 0)
        assert result.movements is existing

    def test_result_identity_keys_unique(self):
        incoming = [
            RECORD_A,
            RECORD_B,
            movement("A", "L1", "L2", "2024-03-14T12:00:00Z"),
            movement("A", "L2", "L3", "2024-03-14T12:00:00Z"),
        ]

        result, added = merge_movements([RECORD_B], incoming)

        keys = [record.identity for record in result]
        assert len(keys) == len(set(keys))
        assert added == 2

    def test_result_sorted_by_parsed_timestamp(self):
        """Mixed offsets sort by instant, not by string."""
        incoming = [
            movement("late", "x", "y", "2024-03-14T13:30:00+01:00"),
            movement("early", "x", "y", "2024-03-14T12:00:00Z"),
            movement("first", "x", "y", "2024-03-14T08:00:00-02:00"),
        ]

        result, _ = merge_movements([], incoming)

        assert [record.card_name for record in result] == ["first", "early", "late"]

    def test_ties_keep_input_order(self):
        same_time = "2024-03-14T12:00:00Z"
        existing = [movement("X", "a", "b", same_time)]
        incoming = [movement("Y", "a", "b", same_time), movement("Z", "a", "b", same_time)]

        result, _ = merge_movements(existing, incoming)

        assert [record.card_name for record in result] == ["X", "Y", "Z"]

    def test_accepts_mappings_with_camel_case_keys(self):
        incoming = [
            {
                "cardName": "B",
                "oldLocation": "L3",
                "newLocation": "L4",
                "timestamp": "2024-03-14T11:00:00Z",
            }
        ]

        result, added = merge_movements([RECORD_A], incoming)

        assert added == 1
        assert result[0] == RECORD_B

    def test_unparsable_timestamp_is_fatal(self):
        with pytest.raises(MovementValidationError, match="timestamp"):
            merge_movements([], [RECORD_A, movement("bad", "x", "y", "yesterday")])

    def test_non_list_input_rejected(self):
        with pytest.raises(MovementValidationError, match="must be a list"):
            merge_movements([], "not a list")

    def test_invalid_element_rejected(self):
        with pytest.raises(MovementValidationError):
            merge_movements([], [42])

    def test_incomplete_mapping_rejected(self):
        with pytest.raises(MovementValidationError):
            merge_movements([], [{"cardName": "A"}])
