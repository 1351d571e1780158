"""In-memory query cache with prefix invalidation."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """A cached value with metadata."""
    value: T
    created_at: float
    ttl_seconds: float
    key: str

    @property
    def is_expired(self) -> bool:
        return time.time() > self.created_at + self.ttl_seconds

    @property
    def age_seconds(self) -> float:
        return time.time() - self.created_at


@dataclass
class QueryCache:
    """
    Thread-safe cache for list/read queries served by the API.

    - TTL-based expiration
    - LRU eviction
    - Prefix invalidation, called by the workflow after every mutation

    Passed explicitly to whoever reads or invalidates it; there is no
    module-level instance.
    """
    # Maximum entries
    max_size: int = 10000

    # Default TTL
    default_ttl_seconds: float = 60.0

    # Disabled caches store nothing and always miss
    enabled: bool = True

    # Internal storage
    _store: dict[str, CacheEntry] = field(default_factory=dict, init=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False)
    _access_order: list[str] = field(default_factory=list, init=False)

    # Stats
    _hits: int = field(default=0, init=False)
    _misses: int = field(default=0, init=False)
    _invalidations: int = field(default=0, init=False)

    def get(self, key: str) -> Any | None:
        """
        Get a value from cache.

        Returns None if not found or expired.
        """
        entry = self._store.get(key)
        if entry is None or entry.is_expired:
            self._misses += 1
            return None

        self._hits += 1
        return entry.value

    def set(self, key: str, value: Any, ttl_seconds: float | None = None) -> None:
        """Set a value in cache."""
        if not self.enabled:
            return

        ttl = ttl_seconds if ttl_seconds is not None else self.default_ttl_seconds
        entry = CacheEntry(value=value, created_at=time.time(), ttl_seconds=ttl, key=key)

        with self._lock:
            self._store[key] = entry
            self._update_access(key)
            self._evict_if_needed()

    def get_or_load(
        self,
        key: str,
        loader: Callable[[], Any],
        ttl_seconds: float | None = None,
    ) -> Any:
        """Get from cache or load if missing/expired (cache-aside)."""
        value = self.get(key)
        if value is not None:
            return value

        value = loader()
        self.set(key, value, ttl_seconds)
        return value

    def invalidate(self, key: str) -> bool:
        """Drop a single key. Returns True if it was present."""
        with self._lock:
            if key not in self._store:
                return False
            del self._store[key]
            if key in self._access_order:
                self._access_order.remove(key)
            self._invalidations += 1
            return True

    def invalidate_prefix(self, prefix: str) -> int:
        """Drop every key starting with prefix. Returns count removed."""
        with self._lock:
            keys = [k for k in self._store if k.startswith(prefix)]
            for key in keys:
                del self._store[key]
                if key in self._access_order:
                    self._access_order.remove(key)
            self._invalidations += len(keys)

        if keys:
            logger.debug(f"Invalidated {len(keys)} cache entries under '{prefix}'")
        return len(keys)

    def clear(self) -> None:
        """Clear all entries."""
        with self._lock:
            self._store.clear()
            self._access_order.clear()

    def _update_access(self, key: str) -> None:
        """Update access order for LRU (caller holds lock)."""
        if key in self._access_order:
            self._access_order.remove(key)
        self._access_order.append(key)

    def _evict_if_needed(self) -> None:
        """Evict oldest entries if over capacity (caller holds lock)."""
        while len(self._store) > self.max_size and self._access_order:
            oldest = self._access_order.pop(0)
            self._store.pop(oldest, None)

    @property
    def stats(self) -> dict[str, Any]:
        total = self._hits + self._misses
        return {
            "size": len(self._store),
            "max_size": self.max_size,
            "hits": self._hits,
            "misses": self._misses,
            "invalidations": self._invalidations,
            "hit_rate": self._hits / total if total > 0 else 0.0,
        }
