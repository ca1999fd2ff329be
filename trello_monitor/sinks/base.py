"""Movement sink abstraction.

A sink owns one durable movement collection (a CSV file, a Google Sheet).
It is always read in full, merged with new movements and rewritten in full.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Sequence

from ..models.movement import MovementRecord
from ..services.merge import merge_movements

logger = logging.getLogger(__name__)


class MovementSink(ABC):
    """Abstract base class for movement destinations."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Get a human readable name for this sink."""
        pass

    @abstractmethod
    def read_all(self) -> List[MovementRecord]:
        """Read the full persisted collection.

        Returns:
            Persisted movements, or an empty list if nothing was written yet
        """
        pass

    @abstractmethod
    def write_all(self, movements: Sequence[MovementRecord]) -> None:
        """Replace the persisted collection with ``movements``.

        Args:
            movements: Complete collection to persist
        """
        pass

    def sync(self, movements: Sequence[MovementRecord]) -> int:
        """Merge ``movements`` into the persisted collection.

        Nothing is written when every movement is already present.

        Args:
            movements: Newly observed movements

        Returns:
            Number of movements added
        """
        existing = self.read_all()
        merged, added = merge_movements(existing, movements)

        if added == 0:
            logger.info("No new movements to write to %s", self.name)
            return 0

        self.write_all(merged)
        logger.info(
            "%s updated with %d new records, %d total, sorted chronologically",
            self.name,
            added,
            len(merged),
        )
        return added
