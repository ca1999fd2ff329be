"""Trello API models."""

from typing import Any, Dict

from pydantic import BaseModel


class Board(BaseModel):
    """Trimmed Trello board as cached under the ``boards`` key."""

    id: str
    name: str

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Board":
        """Create from a raw ``/members/me/boards`` item."""
        return cls(id=data["id"], name=data.get("name", ""))
