"""Shared fixtures for Trello Monitor tests."""

import pytest

from trello_monitor.cache import StalenessCache
from trello_monitor.models.movement import MovementRecord

T0 = 1_710_417_600_000  # 2024-03-14T12:00:00Z
HOUR_MS = 3_600_000
DAY_MS = 24 * HOUR_MS


class FakeClock:
    """Controllable epoch-millisecond clock."""

    def __init__(self, now: int = T0):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(tmp_path, clock):
    store = StalenessCache(
        cache_dir=tmp_path / "cache",
        lifetime_ms=DAY_MS,
        stale_after_ms=HOUR_MS,
        clock=clock,
    )
    yield store
    store.shutdown(wait=True)


def movement(card, old, new, timestamp):
    return MovementRecord(card_name=card, old_location=old, new_location=new, timestamp=timestamp)
