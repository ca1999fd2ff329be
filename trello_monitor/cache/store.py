"""File-backed staleness cache.

Each key is stored as ``<cache_dir>/<key>.json``. Entries are classified by
age into fresh, stale and expired:

- fresh entries are returned as-is;
- stale entries are returned immediately while a background refresh
  rewrites them;
- expired entries are deleted on read and reported as a miss.
"""

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait as wait_futures
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Set, Union

from pydantic import ValidationError

from .entry import CacheEntry, Freshness
from ..utils.error_handling import CacheStorageError

logger = logging.getLogger(__name__)

DEFAULT_CACHE_DIR = ".cache"
DEFAULT_LIFETIME_MS = 24 * 60 * 60 * 1000
DEFAULT_STALE_AFTER_MS = 60 * 60 * 1000

Producer = Callable[[], Any]


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class StalenessCache:
    """Key/value cache with fresh, stale and expired tiers."""

    def __init__(
        self,
        cache_dir: Union[str, Path] = DEFAULT_CACHE_DIR,
        lifetime_ms: int = DEFAULT_LIFETIME_MS,
        stale_after_ms: int = DEFAULT_STALE_AFTER_MS,
        clock: Callable[[], int] = now_ms,
        max_workers: int = 2,
    ):
        """Initialize the cache.

        Args:
            cache_dir: Directory holding one JSON file per key
            lifetime_ms: Maximum age before an entry is treated as gone
            stale_after_ms: Age beyond which an entry is refreshed in the
                background. Clamped to ``lifetime_ms`` if larger.
            clock: Callable returning the current time in epoch milliseconds
            max_workers: Maximum concurrent background refreshes
        """
        if lifetime_ms < 0 or stale_after_ms < 0:
            raise ValueError("Cache lifetime and stale threshold must be non-negative")

        self.cache_dir = Path(cache_dir).expanduser()
        self.lifetime_ms = lifetime_ms
        self.stale_after_ms = min(stale_after_ms, lifetime_ms)
        self.max_workers = max_workers
        self._clock = clock
        self._executor: Optional[ThreadPoolExecutor] = None
        self._lock = threading.Lock()
        self._pending: Set[Future] = set()

        if stale_after_ms > lifetime_ms:
            logger.debug(
                "stale_after (%d ms) exceeds lifetime (%d ms); using lifetime",
                stale_after_ms,
                lifetime_ms,
            )

    def __enter__(self) -> "StalenessCache":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.shutdown(wait=True)

    def _entry_path(self, key: str) -> Path:
        return self.cache_dir / f"{key}.json"

    def _read_entry(self, key: str) -> Optional[CacheEntry]:
        """Read and parse the stored entry for ``key``.

        Unreadable or malformed entries are reported and treated as missing.
        """
        path = self._entry_path(key)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Cache read error for '%s': %s", key, e)
            return None

        try:
            entry = CacheEntry.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("Ignoring malformed cache entry '%s': %s", key, e)
            return None

        entry.key = key
        return entry

    # === Public API ===

    def get(self, key: str, producer: Optional[Producer] = None) -> Any:
        """Return the cached value for ``key`` or None on a miss.

        Args:
            key: Cache key
            producer: Optional callable returning fresh data. Invoked in the
                background when the entry is stale.

        Returns:
            Cached value, or None if absent, expired or unreadable
        """
        entry = self._read_entry(key)
        if entry is None:
            return None

        freshness = entry.classify(self._clock(), self.stale_after_ms, self.lifetime_ms)

        if freshness is Freshness.EXPIRED:
            logger.debug("Cache entry '%s' expired, evicting", key)
            try:
                self.delete(key)
            except OSError as e:
                logger.warning("Could not evict expired cache entry '%s': %s", key, e)
            return None

        if freshness is Freshness.STALE and producer is not None:
            logger.debug("Cache entry '%s' is stale, refreshing in background", key)
            self._schedule_refresh(key, producer)

        return entry.value

    def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``, replacing any previous entry.

        Args:
            key: Cache key
            value: JSON-serializable value

        Raises:
            CacheStorageError: If the value cannot be serialized
            OSError: If the entry cannot be written
        """
        entry = CacheEntry(key=key, stored_at=self._clock(), value=value)
        try:
            payload = entry.to_json()
        except (TypeError, ValueError) as e:
            raise CacheStorageError(f"Cannot cache value for '{key}': {e}") from e

        path = self._entry_path(key)
        try:
            path.write_text(payload, encoding="utf-8")
        except FileNotFoundError:
            logger.debug("Cache directory %s missing, creating it", self.cache_dir)
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(payload, encoding="utf-8")

    def delete(self, key: str) -> None:
        """Remove the entry for ``key``. Missing entries are ignored."""
        try:
            self._entry_path(key).unlink()
        except FileNotFoundError:
            return

    def get_or_fetch(self, key: str, producer: Producer, force_fresh: bool = False) -> Any:
        """Return the cached value, calling ``producer`` on a miss.

        Errors raised by ``producer`` on this foreground path propagate
        unchanged.

        Args:
            key: Cache key
            producer: Callable returning fresh data
            force_fresh: Skip the cache lookup and always call ``producer``

        Returns:
            Cached or freshly produced value
        """
        if not force_fresh:
            cached = self.get(key, producer)
            if cached is not None:
                return cached

        value = producer()
        self.set(key, value)
        return value

    # === Background refresh ===

    def _schedule_refresh(self, key: str, producer: Producer) -> Future:
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.max_workers,
                    thread_name_prefix="cache-refresh",
                )
            future = self._executor.submit(self._refresh, key, producer)
            self._pending.add(future)
        future.add_done_callback(self._discard_pending)
        return future

    def _discard_pending(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

    def _refresh(self, key: str, producer: Producer) -> bool:
        """Run ``producer`` and store its result. Never raises."""
        try:
            value = producer()
            self.set(key, value)
        except Exception:
            logger.exception("Background refresh failed for cache key '%s'", key)
            return False

        logger.debug("Background refresh stored new value for '%s'", key)
        return True

    def wait_for_refreshes(self, timeout: Optional[float] = None) -> bool:
        """Block until in-flight background refreshes finish.

        Args:
            timeout: Maximum seconds to wait (None waits forever)

        Returns:
            True if no refresh is still running
        """
        with self._lock:
            pending = list(self._pending)
        if not pending:
            return True
        _, not_done = wait_futures(pending, timeout=timeout)
        return not not_done

    def shutdown(self, wait: bool = True) -> None:
        """Stop the background refresh executor."""
        with self._lock:
            executor = self._executor
            self._executor = None
        if executor:
            executor.shutdown(wait=wait)

    # === Maintenance ===

    def clear(self) -> int:
        """Delete every cache entry.

        Returns:
            Number of entries removed
        """
        if not self.cache_dir.is_dir():
            return 0

        removed = 0
        for path in self.cache_dir.glob("*.json"):
            try:
                path.unlink()
            except FileNotFoundError:
                continue
            removed += 1
        return removed

    def stats(self) -> Dict[str, Any]:
        """Get cache statistics.

        Returns:
            Dict with directory, thresholds, total size and per-key details
        """
        now = self._clock()
        entries = []
        total_bytes = 0

        if self.cache_dir.is_dir():
            for path in sorted(self.cache_dir.glob("*.json")):
                key = path.stem
                try:
                    size = path.stat().st_size
                except OSError:
                    continue
                total_bytes += size

                entry = self._read_entry(key)
                if entry is None:
                    entries.append({"key": key, "size_bytes": size, "age_seconds": None, "status": "corrupt"})
                    continue

                entries.append(
                    {
                        "key": key,
                        "size_bytes": size,
                        "age_seconds": entry.age_ms(now) / 1000,
                        "status": entry.classify(now, self.stale_after_ms, self.lifetime_ms).value,
                    }
                )

        return {
            "cache_dir": str(self.cache_dir),
            "lifetime_hours": self.lifetime_ms / 3_600_000,
            "stale_after_minutes": self.stale_after_ms / 60_000,
            "entry_count": len(entries),
            "total_bytes": total_bytes,
            "entries": entries,
        }
