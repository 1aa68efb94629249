"""In-memory caches for expensive remote fetches."""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Generic, Hashable, Optional, TypeVar

logger = logging.getLogger(__name__)

V = TypeVar("V")

# Key used by caches wrapping a zero-argument producer
NO_KEY: Hashable = None


@dataclass
class CacheEntry(Generic[V]):
    """A computed value and the time it was stored."""
    value: V
    stored_at: float = field(default_factory=time.monotonic)


class TTLCache(Generic[V]):
    """
    Memoizes an async producer per key for ``ttl_seconds``.

    A call within the TTL window returns the stored value. A call on a missing
    or stale entry runs the producer once and replaces value and timestamp.
    Callers arriving while a refresh is in flight await the same task, so at
    most one producer call runs per key. The refresh task is shielded from its
    callers: a cancelled caller leaves the refresh running and the entry is
    only ever written with a complete value. Failures are not stored.

    With ``ttl_seconds=None`` entries never expire.

    Usage:
        cache = TTLCache(fetch_projects, "projects", ttl_seconds=900)
        projects = await cache.get()

        releases = TTLCache(client.list_releases, "releases", ttl_seconds=300)
        tags = await releases.get("unnamed/creative")
    """

    def __init__(
        self,
        producer: Callable[..., Awaitable[V]],
        name: str,
        ttl_seconds: Optional[float],
        clock: Callable[[], float] = time.monotonic,
    ):
        self.producer = producer
        self.name = name
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[Hashable, CacheEntry[V]] = {}
        self._inflight: Dict[Hashable, "asyncio.Task[V]"] = {}

    def _is_fresh(self, entry: CacheEntry[V]) -> bool:
        if self.ttl_seconds is None:
            return True
        return self._clock() - entry.stored_at < self.ttl_seconds

    async def get(self, key: Hashable = NO_KEY) -> V:
        entry = self._entries.get(key)
        if entry is not None and self._is_fresh(entry):
            return entry.value

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._refresh(key))
            self._inflight[key] = task
            task.add_done_callback(lambda t, k=key: self._on_done(k, t))

        return await asyncio.shield(task)

    async def _refresh(self, key: Hashable) -> V:
        label = self.name if key is NO_KEY else f"{self.name}[{key}]"
        logger.info(f"Refreshing cache {label}")
        if key is NO_KEY:
            value = await self.producer()
        else:
            value = await self.producer(key)
        self._entries[key] = CacheEntry(value=value, stored_at=self._clock())
        return value

    def _on_done(self, key: Hashable, task: "asyncio.Task[V]") -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        if task.cancelled():
            return
        # Retrieve the exception so it is not reported as unhandled when every
        # caller has gone away; the callers still awaiting it get it re-raised.
        error = task.exception()
        if error is not None:
            logger.warning(f"Cache {self.name} refresh failed for {key!r}: {error}")

    def peek(self, key: Hashable = NO_KEY) -> Optional[V]:
        """Return the stored value without refreshing, fresh or not."""
        entry = self._entries.get(key)
        return entry.value if entry is not None else None

    def invalidate(self, key: Hashable = NO_KEY) -> None:
        """Drop a stored entry; the next get() runs the producer."""
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"TTLCache(name={self.name!r}, ttl_seconds={self.ttl_seconds!r}, entries={len(self)})"


def describe(cache: TTLCache[Any]) -> Dict[str, Any]:
    """Small status payload for health endpoints."""
    return {
        "name": cache.name,
        "ttl_seconds": cache.ttl_seconds,
        "entries": len(cache),
    }
