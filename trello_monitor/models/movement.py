"""Card movement models for Trello Monitor."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field

from ..utils.error_handling import MovementValidationError

NOT_AVAILABLE = "N/A"

# Column headers shared by the CSV file and the Google Sheet
MOVEMENT_HEADERS = [
    "Card Name",
    "Old Board/List Name",
    "New Board/List Name",
    "Timestamp of Movement",
]

IdentityKey = Tuple[str, str, str, str]


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp into an aware datetime.

    A trailing ``Z`` is accepted and timestamps without an offset are
    treated as UTC.

    Args:
        value: ISO-8601 string

    Returns:
        Timezone-aware datetime

    Raises:
        MovementValidationError: If the string is not a valid timestamp
    """
    if not isinstance(value, str) or not value.strip():
        raise MovementValidationError(f"Invalid movement timestamp: {value!r}")

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise MovementValidationError(f"Invalid movement timestamp: {value!r}") from e

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: datetime) -> str:
    """Format a datetime as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


class MovementRecord(BaseModel):
    """A card moving from one list to another."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    card_name: str = Field(alias="cardName")
    old_location: str = Field(alias="oldLocation")
    new_location: str = Field(alias="newLocation")
    timestamp: str = Field(description="ISO-8601 instant of the movement")

    @property
    def identity(self) -> IdentityKey:
        """Key identifying the same observation regardless of origin."""
        return (self.card_name, self.old_location, self.new_location, self.timestamp)

    def parsed_timestamp(self) -> datetime:
        """Get the movement time as an aware datetime."""
        return parse_timestamp(self.timestamp)

    def to_row(self) -> List[str]:
        """Convert to a tabular row in ``MOVEMENT_HEADERS`` order."""
        return [self.card_name, self.old_location, self.new_location, self.timestamp]

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> "MovementRecord":
        """Create from a tabular row, padding missing trailing cells."""
        cells = [str(cell).strip() if cell is not None else "" for cell in row]
        cells += [""] * (4 - len(cells))
        return cls(
            card_name=cells[0],
            old_location=cells[1],
            new_location=cells[2],
            timestamp=cells[3],
        )

    @classmethod
    def from_trello_action(cls, action: Dict[str, Any]) -> "MovementRecord":
        """Create from a Trello ``updateCard`` action.

        Args:
            action: Raw action dict from the Trello API

        Returns:
            MovementRecord for the list change
        """
        data = action.get("data") or {}
        card = data.get("card") or {}
        list_before = data.get("listBefore")
        list_after = data.get("listAfter")

        return cls(
            card_name=card.get("name", ""),
            old_location=list_before.get("name", NOT_AVAILABLE) if list_before else NOT_AVAILABLE,
            new_location=list_after.get("name", NOT_AVAILABLE) if list_after else NOT_AVAILABLE,
            timestamp=format_timestamp(parse_timestamp(action.get("date", ""))),
        )


def actions_to_movements(actions: List[Dict[str, Any]]) -> List[MovementRecord]:
    """Map Trello actions to movement records."""
    return [MovementRecord.from_trello_action(action) for action in actions]
