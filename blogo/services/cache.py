import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Dict, Generic, Optional, TypeVar

from blogo.errors import CacheError
from blogo.schemas.health import CacheStats

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    value: T
    expires_at: float


class TTLCache(Generic[T]):
    """
    In-memory key/value store with per-entry TTL (seconds).
    Expiry is checked lazily on read; there is no background sweep.
    """

    def __init__(self, name: str = "cache", clock: Callable[[], float] = time.monotonic):
        self.name = name
        self.clock = clock
        self._store: Dict[str, CacheEntry[T]] = {}
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> Optional[T]:
        try:
            entry = self._store.get(key)
            if entry is None:
                self.misses += 1
                return None
            if self.clock() >= entry.expires_at:
                del self._store[key]
                self.misses += 1
                return None
            self.hits += 1
            return entry.value
        except Exception as e:
            raise CacheError(f"Cache '{self.name}' get failed for {key}", e) from e

    def set(self, key: str, value: T, ttl: Optional[float] = None) -> None:
        try:
            expires_at = math.inf if ttl is None else self.clock() + ttl
            self._store[key] = CacheEntry(value=value, expires_at=expires_at)
        except Exception as e:
            raise CacheError(f"Cache '{self.name}' set failed for {key}", e) from e

    def delete(self, key: str) -> None:
        try:
            self._store.pop(key, None)
        except Exception as e:
            raise CacheError(f"Cache '{self.name}' delete failed for {key}", e) from e

    def clear(self) -> None:
        try:
            self._store.clear()
        except Exception as e:
            raise CacheError(f"Cache '{self.name}' clear failed", e) from e
        logger.debug(f"Cleared cache '{self.name}'")

    def purge_expired(self) -> int:
        """Drop every expired entry and return how many were removed."""
        now = self.clock()
        stale_keys = [key for key, entry in self._store.items() if now >= entry.expires_at]
        for key in stale_keys:
            self._store.pop(key, None)
        return len(stale_keys)

    def __len__(self) -> int:
        return len(self._store)

    def stats(self) -> CacheStats:
        lookups = self.hits + self.misses
        return CacheStats(
            hits=self.hits,
            misses=self.misses,
            size=len(self._store),
            hitRate=(self.hits / lookups) if lookups else None,
        )
