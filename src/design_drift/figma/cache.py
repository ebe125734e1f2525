"""TTL cache for successful Figma API responses.

Entries are keyed by request key (method, path and canonical query) and are
evicted lazily: an expired entry is dropped the next time it is looked up.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CacheEntry:
    """A cached value and the clock time at which it stops being valid."""

    value: Any
    expires_at: float

    def is_fresh(self, now: float) -> bool:
        return now < self.expires_at


class ResponseCache:
    """In-memory response cache with a fixed time-to-live.

    Args:
        ttl: Seconds an entry stays valid after it is stored
        clock: Monotonic time source, injectable for tests
    """

    def __init__(
        self, ttl: float, clock: Callable[[], float] = time.monotonic
    ) -> None:
        if ttl < 0:
            raise ValueError("ttl must be non-negative")
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str) -> Any | None:
        """Return the cached value for key, or None if missing or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not entry.is_fresh(self._clock()):
            del self._entries[key]
            return None
        return entry.value

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = CacheEntry(value=value, expires_at=self._clock() + self.ttl)

    def clear(self) -> None:
        """Invalidate every entry immediately, regardless of TTL."""
        count = len(self._entries)
        self._entries.clear()
        if count:
            logger.debug("Cleared %d cached responses", count)

    def __len__(self) -> int:
        return len(self._entries)
