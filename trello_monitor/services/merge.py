"""Merge engine for movement collections.

Reconciles freshly observed movements with the collection a sink already
holds. The result is deduplicated by identity key and sorted by timestamp,
so writing it back in full converges no matter how often a sync runs.
"""

from collections.abc import Mapping
from typing import Any, Dict, List, NamedTuple, Sequence

from pydantic import ValidationError

from ..models.movement import IdentityKey, MovementRecord
from ..utils.error_handling import MovementValidationError


class MergeResult(NamedTuple):
    """Outcome of a merge: the full collection and how many records were new."""

    movements: List[MovementRecord]
    added_count: int


def _coerce_records(incoming: Any) -> List[MovementRecord]:
    if not isinstance(incoming, (list, tuple)):
        raise MovementValidationError("Movements must be a list")

    records = []
    for item in incoming:
        if isinstance(item, MovementRecord):
            records.append(item)
        elif isinstance(item, Mapping):
            try:
                records.append(MovementRecord.model_validate(item))
            except ValidationError as e:
                raise MovementValidationError(f"Invalid movement record: {e}") from e
        else:
            raise MovementValidationError(
                f"Movement must be a MovementRecord or mapping, got {type(item).__name__}"
            )
    return records


def merge_movements(
    existing: Sequence[MovementRecord],
    incoming: Sequence[Any],
) -> MergeResult:
    """Merge new movements into an existing collection.

    Args:
        existing: Collection currently persisted by a sink
        incoming: Newly observed movements (records or mappings)

    Returns:
        MergeResult. When nothing is new, ``movements`` is ``existing``
        itself and ``added_count`` is 0; callers should skip the write.

    Raises:
        MovementValidationError: If ``incoming`` is not a list or contains
            a malformed record or an unparsable timestamp
    """
    records = _coerce_records(incoming)
    for record in records:
        record.parsed_timestamp()

    # Last seen wins, first-seen position is kept
    unique: Dict[IdentityKey, MovementRecord] = {}
    for record in records:
        unique[record.identity] = record

    existing_keys = {record.identity for record in existing}
    new_records = [record for key, record in unique.items() if key not in existing_keys]

    if not new_records:
        return MergeResult(existing, 0)

    merged = sorted([*existing, *new_records], key=MovementRecord.parsed_timestamp)
    return MergeResult(merged, len(new_records))
