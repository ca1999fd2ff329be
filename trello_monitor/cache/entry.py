"""Cache entry model for the staleness cache."""

import json
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Freshness(str, Enum):
    """Age classification of a cache entry."""

    FRESH = "fresh"
    STALE = "stale"
    EXPIRED = "expired"


class CacheEntry(BaseModel):
    """A single cached value with its write timestamp.

    Serialized on disk as ``{"storedAt": <epoch ms>, "value": <json>}``.
    """

    model_config = ConfigDict(populate_by_name=True)

    key: str = Field(default="", exclude=True)
    stored_at: int = Field(alias="storedAt", ge=0, description="Write time in epoch milliseconds")
    value: Any

    def age_ms(self, now_ms: int) -> int:
        """Milliseconds elapsed since the entry was written."""
        return now_ms - self.stored_at

    def classify(self, now_ms: int, stale_after_ms: int, lifetime_ms: int) -> Freshness:
        """Classify the entry age against the cache thresholds.

        Args:
            now_ms: Current time in epoch milliseconds
            stale_after_ms: Age beyond which the entry is due for renewal
            lifetime_ms: Age beyond which the entry is treated as gone

        Returns:
            Freshness of the entry
        """
        age = self.age_ms(now_ms)
        if age > lifetime_ms:
            return Freshness.EXPIRED
        if age > stale_after_ms:
            return Freshness.STALE
        return Freshness.FRESH

    def to_json(self) -> str:
        """Serialize to the on-disk JSON format."""
        return json.dumps(self.model_dump(by_alias=True))
