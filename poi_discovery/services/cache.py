from __future__ import annotations

import asyncio
import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Optional

from poi_discovery.core.contracts import POISuggestionGroup
from poi_discovery.core.settings import settings

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    result: POISuggestionGroup
    expires_at: float


class DiscoveryCache:
    """
    In-process session cache for discovery runs.

    Keeps finished result groups for ``ttl_s`` seconds, at most
    ``max_entries`` of them (oldest inserted goes first), and tracks the
    single pending run per key so concurrent duplicate requests share it.

    Construct once per process and hand the same instance to every run.
    """

    def __init__(
        self,
        *,
        ttl_s: float | None = None,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_s = float(ttl_s if ttl_s is not None else settings.poi_cache_ttl_s)
        self.max_entries = max(1, int(max_entries if max_entries is not None else settings.poi_cache_max_entries))
        self._clock = clock

        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._in_flight: Dict[str, asyncio.Task] = {}
        # cache check → in-flight check → register is one critical section
        self._lock = threading.Lock()

    # ──────────────────────────────────────────────────────────
    # Entries
    # ──────────────────────────────────────────────────────────

    def _get_locked(self, key: str) -> Optional[POISuggestionGroup]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() > entry.expires_at:
            del self._entries[key]
            return None
        return entry.result

    def _set_locked(self, key: str, result: POISuggestionGroup) -> None:
        if key in self._entries:
            del self._entries[key]
        while len(self._entries) >= self.max_entries:
            oldest, _ = self._entries.popitem(last=False)
            logger.debug("[cache] evicted oldest key=%s", oldest[:12])
        self._entries[key] = CacheEntry(result=result, expires_at=self._clock() + self.ttl_s)

    def get(self, key: str) -> Optional[POISuggestionGroup]:
        with self._lock:
            return self._get_locked(key)

    def set(self, key: str, result: POISuggestionGroup) -> None:
        with self._lock:
            self._set_locked(key, result)

    def evict(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    # ──────────────────────────────────────────────────────────
    # In-flight coalescing
    # ──────────────────────────────────────────────────────────

    def pending(self, key: str) -> Optional[asyncio.Task]:
        with self._lock:
            return self._in_flight.get(key)

    def _settle(self, key: str, task: asyncio.Task) -> None:
        with self._lock:
            if not task.cancelled() and task.exception() is None:
                self._set_locked(key, task.result())
            if self._in_flight.get(key) is task:
                del self._in_flight[key]

    async def get_or_start(
        self,
        key: str,
        factory: Callable[[], Awaitable[POISuggestionGroup]],
    ) -> POISuggestionGroup:
        """
        Cached result, else the pending run for ``key``, else a new run from
        ``factory``.  The run's result is cached when it completes; its
        in-flight registration is dropped however it settles.
        """
        with self._lock:
            cached = self._get_locked(key)
            if cached is not None:
                logger.info("[cache] hit key=%s total=%d", key[:12], cached.total_found)
                return cached

            task = self._in_flight.get(key)
            if task is not None:
                logger.info("[cache] run already in flight key=%s — sharing it", key[:12])
            else:
                task = asyncio.ensure_future(factory())
                self._in_flight[key] = task
                task.add_done_callback(lambda t, k=key: self._settle(k, t))

        # one caller giving up must not cancel the run for the others
        return await asyncio.shield(task)
