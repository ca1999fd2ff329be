"""Data models for Trello Monitor."""

from .movement import MOVEMENT_HEADERS, MovementRecord, actions_to_movements
from .trello import Board

__all__ = [
    "MOVEMENT_HEADERS",
    "MovementRecord",
    "actions_to_movements",
    "Board",
]
