"""Session-scoped query cache.

Entries are addressed by tuple keys that form a hierarchy, so
``invalidate(("customers", "list"))`` marks every list entry stale while
leaving detail entries alone. Reads go through :meth:`QueryCache.fetch`,
which serves fresh data from memory, shares one in-flight task between
concurrent callers of the same key, and retries a failed fetch a bounded
number of times. Invalidation never drops data; it only forces the next
``fetch`` to go back to the server.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Hashable

from customer_accounts.core.config import settings
from customer_accounts.core.logging import get_logger

logger = get_logger(__name__)

QueryKey = tuple[Hashable, ...]
Fetcher = Callable[[], Awaitable[Any]]


@dataclass
class QueryState:
    data: Any = None
    error: BaseException | None = None
    updated_at: float | None = None
    invalidated: bool = False
    fetch_count: int = 0

    @property
    def has_data(self) -> bool:
        return self.updated_at is not None


class QueryCache:
    def __init__(
        self,
        stale_time: float | None = None,
        retry: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.stale_time = settings.query_stale_time if stale_time is None else stale_time
        self.retry = settings.query_retry if retry is None else retry
        self._clock = clock
        self._entries: dict[QueryKey, QueryState] = {}
        self._inflight: dict[QueryKey, asyncio.Task] = {}
        self._generations: dict[QueryKey, int] = {}

    # ------------------------------------------------------------------
    # Reads

    def is_stale(self, key: QueryKey) -> bool:
        state = self._entries.get(tuple(key))
        if state is None or not state.has_data or state.invalidated:
            return True
        return self._clock() - state.updated_at >= self.stale_time

    async def fetch(self, key: QueryKey, fetcher: Fetcher) -> Any:
        """Return data for ``key``, fetching only if missing, stale or invalidated."""
        key = tuple(key)
        if not self.is_stale(key):
            return self._entries[key].data

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._run(key, fetcher, self._generations.get(key, 0)))
            self._inflight[key] = task
        return await asyncio.shield(task)

    async def _run(self, key: QueryKey, fetcher: Fetcher, generation: int) -> Any:
        attempts = self.retry + 1
        try:
            for attempt in range(1, attempts + 1):
                state = self._entries.setdefault(key, QueryState())
                state.fetch_count += 1
                try:
                    data = await fetcher()
                except Exception as exc:
                    if attempt < attempts:
                        logger.info("Retrying query %s after error: %s", key, exc)
                        continue
                    self._entries.setdefault(key, state).error = exc
                    logger.warning("Query %s failed after %d attempt(s): %s", key, attempt, exc)
                    raise

                state = self._entries.setdefault(key, QueryState())
                state.data = data
                state.error = None
                state.updated_at = self._clock()
                # an invalidation that landed mid-flight keeps the entry stale
                state.invalidated = self._generations.get(key, 0) != generation
                return data
        finally:
            self._inflight.pop(key, None)

    # ------------------------------------------------------------------
    # Writes

    def invalidate(self, prefix: QueryKey) -> int:
        """Mark every entry under ``prefix`` stale; returns how many were marked."""
        prefix = tuple(prefix)
        size = len(prefix)
        marked = 0
        for key in set(self._entries) | set(self._inflight):
            if key[:size] != prefix:
                continue
            self._generations[key] = self._generations.get(key, 0) + 1
            state = self._entries.get(key)
            if state is not None:
                state.invalidated = True
                marked += 1
        if marked:
            logger.debug("Invalidated %d query(ies) under %s", marked, prefix)
        return marked

    def get_state(self, key: QueryKey) -> QueryState | None:
        return self._entries.get(tuple(key))

    def get_query_data(self, key: QueryKey) -> Any:
        state = self._entries.get(tuple(key))
        return state.data if state is not None else None

    def set_query_data(self, key: QueryKey, data: Any) -> None:
        state = self._entries.setdefault(tuple(key), QueryState())
        state.data = data
        state.error = None
        state.updated_at = self._clock()
        state.invalidated = False

    def is_fetching(self, key: QueryKey) -> bool:
        return tuple(key) in self._inflight

    def keys(self) -> list[QueryKey]:
        return list(self._entries)

    def remove(self, key: QueryKey) -> None:
        """Drop ``key``; a fetch still in flight lands as an invalidated entry."""
        key = tuple(key)
        self._entries.pop(key, None)
        self._forget_generation(key)

    def clear(self) -> None:
        self._entries.clear()
        for key in set(self._generations) | set(self._inflight):
            self._forget_generation(key)

    def _forget_generation(self, key: QueryKey) -> None:
        if key in self._inflight:
            self._generations[key] = self._generations.get(key, 0) + 1
        else:
            self._generations.pop(key, None)
