from __future__ import annotations

import asyncio
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, TypeVar

from movie_catalog.config.settings import (
    QUERY_CACHE_MAX_SIZE,
    QUERY_RETRY,
    QUERY_RETRY_DELAY_S,
    QUERY_STALE_MINUTES,
)
from movie_catalog.domain.catalog import NetworkError, QueryKey

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class _Entry:
    value: Any = None
    fetched_at: Optional[float] = None
    pending: Optional["asyncio.Future[Any]"] = None


class QueryCache:
    """Keyed TTL cache with in-flight deduplication and retries.

    Each key maps to {cached value, timestamp, pending request}. A fresh value
    is returned as-is; an expired one is treated as absent. Concurrent fetches
    of the same key await the same request. Failed loads are retried before
    the last error propagates; failures are never cached.

    Limitation: per-process only, lives on one event loop.
    """

    def __init__(
        self,
        *,
        stale_minutes: float = QUERY_STALE_MINUTES,
        retries: int = QUERY_RETRY,
        retry_delay_s: float = QUERY_RETRY_DELAY_S,
        max_size: int = QUERY_CACHE_MAX_SIZE,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl_s = max(float(stale_minutes), 0.0) * 60.0
        self._retries = max(int(retries), 0)
        self._retry_delay_s = max(float(retry_delay_s), 0.0)
        self._max_size = max(int(max_size), 1)
        self._clock = clock
        self._entries: OrderedDict[QueryKey, _Entry] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def _is_fresh(self, entry: _Entry) -> bool:
        if entry.fetched_at is None:
            return False
        return self._clock() - entry.fetched_at < self._ttl_s

    def peek(self, key: QueryKey) -> Optional[Any]:
        """Return the fresh cached value for a key without fetching."""
        entry = self._entries.get(key)
        if entry is None or not self._is_fresh(entry):
            return None
        return entry.value

    def is_pending(self, key: QueryKey) -> bool:
        entry = self._entries.get(key)
        return entry is not None and entry.pending is not None

    async def fetch(self, key: QueryKey, loader: Callable[[], Awaitable[T]]) -> T:
        entry = self._entries.get(key)
        if entry is not None:
            if self._is_fresh(entry):
                self._entries.move_to_end(key)
                return entry.value
            if entry.pending is not None:
                return await asyncio.shield(entry.pending)

        loop = asyncio.get_running_loop()
        future: asyncio.Future[Any] = loop.create_future()
        if entry is None:
            entry = _Entry(pending=future)
            self._store(key, entry)
        else:
            entry.pending = future
        try:
            value = await self._load_with_retry(key, loader)
        except BaseException as exc:
            entry.pending = None
            if entry.fetched_at is None and self._entries.get(key) is entry:
                del self._entries[key]
            if not future.done():
                if isinstance(exc, asyncio.CancelledError):
                    future.cancel()
                else:
                    future.set_exception(exc)
                    # Mark retrieved so waiter-less failures do not warn on GC.
                    future.exception()
            raise
        entry.value = value
        entry.fetched_at = self._clock()
        entry.pending = None
        if self._entries.get(key) is not entry:
            self._store(key, entry)
        else:
            self._trim(keep=key)
        future.set_result(value)
        return value

    async def _load_with_retry(self, key: QueryKey, loader: Callable[[], Awaitable[T]]) -> T:
        attempts = self._retries + 1
        for attempt in range(1, attempts + 1):
            try:
                return await loader()
            except NetworkError as exc:
                if attempt >= attempts:
                    logger.error("query failed key=%s attempts=%s error=%s", key, attempt, exc)
                    raise
                logger.warning(
                    "query attempt failed key=%s attempt=%s/%s error=%s", key, attempt, attempts, exc
                )
                if self._retry_delay_s:
                    await asyncio.sleep(self._retry_delay_s)
        raise AssertionError("unreachable")

    def _store(self, key: QueryKey, entry: _Entry) -> None:
        self._entries[key] = entry
        self._entries.move_to_end(key)
        self._trim(keep=key)

    def _trim(self, *, keep: QueryKey) -> None:
        # Pending entries have waiters and are never evicted; the cache may
        # exceed max_size while they run and is trimmed back as they settle.
        while len(self._entries) > self._max_size:
            victim = next(
                (k for k, v in self._entries.items() if v.pending is None and k != keep),
                None,
            )
            if victim is None:
                return
            del self._entries[victim]

    def invalidate(self, key: Optional[QueryKey] = None) -> int:
        """Drop one settled key (or every settled key); returns how many were dropped."""
        if key is not None:
            entry = self._entries.get(key)
            if entry is None or entry.pending is not None:
                return 0
            del self._entries[key]
            return 1
        settled = [k for k, v in self._entries.items() if v.pending is None]
        for k in settled:
            del self._entries[k]
        return len(settled)

    def cleanup_expired(self) -> int:
        expired = [
            k for k, v in self._entries.items() if v.pending is None and not self._is_fresh(v)
        ]
        for k in expired:
            del self._entries[k]
        return len(expired)
