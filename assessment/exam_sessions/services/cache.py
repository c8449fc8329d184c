"""
TTL cache over a Django cache backend, with an injected clock.

Constructed once at application start and handed to the components that need
it. Entries live in the configured cache (Redis in production, see
``CACHES``), so an invalidation in one worker is seen by every worker. Each
entry carries its write time; an entry older than its TTL by the injected clock
is dropped on the next read, in addition to the backend's own timeout. The
cache is read-through only; losing it never changes results.
"""

import datetime
import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Hashable, Optional

from django.core.cache import caches

from .clock import Clock

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass
class CacheEntry:
    value: Any
    stored_at: datetime.datetime
    ttl: float

    def age(self, now: datetime.datetime) -> float:
        return (now - self.stored_at).total_seconds()

    def is_expired(self, now: datetime.datetime) -> bool:
        return self.age(now) > self.ttl


class TTLCache:
    """
    Key/value cache whose entries live for ``ttl`` seconds.

    Keys are namespaced with ``key_prefix`` and a generation counter, so
    ``invalidate_all`` drops this cache's entries without clearing the rest of
    the backend.

    Example:
        >>> cache = TTLCache(clock=SystemClock(), ttl=1800)
        >>> order = cache.get_or_fetch(("bank", 3), lambda: load_order(3))
    """

    def __init__(
        self,
        clock: Clock,
        ttl: float = 1800,
        alias: str = "default",
        key_prefix: str = "exam",
    ) -> None:
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        self.clock = clock
        self.ttl = ttl
        self.alias = alias
        self.key_prefix = key_prefix

    @property
    def backend(self):
        return caches[self.alias]

    def get(self, key: Hashable, default: Any = None) -> Any:
        cache_key = self._cache_key(key)
        entry = self.backend.get(cache_key)
        if entry is None:
            logger.debug(f"[Cache] Miss: {key}")
            return default

        now = self.clock.now()
        if entry.is_expired(now):
            self.backend.delete(cache_key)
            logger.debug(f"[Cache] Expired: {key}")
            return default
        logger.debug(f"[Cache] Hit: {key} (age {entry.age(now):.0f}s)")
        return entry.value

    def set(self, key: Hashable, value: Any, ttl: Optional[float] = None) -> None:
        ttl = ttl or self.ttl
        entry = CacheEntry(value=value, stored_at=self.clock.now(), ttl=ttl)
        self.backend.set(self._cache_key(key), entry, timeout=math.ceil(ttl))

    def invalidate(self, key: Hashable) -> bool:
        removed = bool(self.backend.delete(self._cache_key(key)))
        if removed:
            logger.debug(f"[Cache] Invalidated: {key}")
        return removed

    def invalidate_all(self) -> None:
        generation_key = self._generation_key()
        try:
            generation = self.backend.incr(generation_key)
        except ValueError:
            generation = 2
            self.backend.set(generation_key, generation, timeout=None)
        logger.debug(f"[Cache] Invalidated all (generation {generation})")

    def get_or_fetch(self, key: Hashable, fetch: Callable[[], Any], ttl: Optional[float] = None) -> Any:
        """Return the cached value for ``key``, loading and storing it on a miss."""
        value = self.get(key, _MISSING)
        if value is not _MISSING:
            return value
        value = fetch()
        self.set(key, value, ttl)
        return value

    # --- Keys ---

    def _generation_key(self) -> str:
        return f"{self.key_prefix}:generation"

    def _cache_key(self, key: Hashable) -> str:
        generation = self.backend.get_or_set(self._generation_key(), 1, timeout=None)
        if isinstance(key, tuple):
            key = ":".join(str(part) for part in key)
        return f"{self.key_prefix}:{generation}:{key}"
