"""TTL cache for fetched Flux resources.

Entries are keyed by ``(cluster, resource_type, namespace)`` so a single
cluster's entries can be dropped without touching the others. The cache is
meant to be used from one event loop thread and does no locking.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any, NamedTuple

import structlog

logger = structlog.get_logger()


class CacheKey(NamedTuple):
    """Identity of one cached fetch."""

    cluster: str
    resource_type: str = ""
    namespace: str | None = None


class ResourceCache:
    """In-memory cache whose entries expire after a fixed TTL.

    A TTL of zero disables caching: ``set`` stores nothing.

    Example:
        >>> cache = ResourceCache(ttl=5.0)
        >>> cache.set(CacheKey("prod", "Kustomization"), [])
        >>> cache.get(CacheKey("prod", "Kustomization"))
        []
    """

    def __init__(
        self,
        ttl: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache.

        Args:
            ttl: Seconds an entry stays valid.
            clock: Monotonic time source, injectable for tests.
        """
        self._ttl = ttl
        self._clock = clock
        self._entries: dict[CacheKey, tuple[float, Any]] = {}

    @property
    def ttl(self) -> float:
        return self._ttl

    def get(self, key: CacheKey) -> Any | None:
        """Return the cached value, or None if missing or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    def set(self, key: CacheKey, value: Any) -> None:
        """Store a value for ``ttl`` seconds."""
        if self._ttl <= 0:
            return
        self._entries[key] = (self._clock() + self._ttl, value)

    def invalidate(self, cluster: str | None = None) -> int:
        """Drop the entries of one cluster, or all entries.

        Args:
            cluster: Cluster whose entries to drop; None clears everything.

        Returns:
            Number of entries removed.
        """
        if cluster is None:
            removed = len(self._entries)
            self._entries.clear()
        else:
            stale = [key for key in self._entries if key.cluster == cluster]
            for key in stale:
                del self._entries[key]
            removed = len(stale)
        logger.debug("cache_invalidated", cluster=cluster, removed=removed)
        return removed

    def __len__(self) -> int:
        return len(self._entries)
