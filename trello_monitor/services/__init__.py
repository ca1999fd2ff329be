"""Services for Trello Monitor."""

from .merge import MergeResult, merge_movements
from .trello_client import TrelloClient

__all__ = [
    "MergeResult",
    "merge_movements",
    "TrelloClient",
]
