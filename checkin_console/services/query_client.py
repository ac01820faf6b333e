"""
Query cache sitting between console workflows and the resource APIs.

Reads are cached under hierarchical tuple keys such as
``("guests", "list", 12, (("page", 1),))``. Identical concurrent reads share
one in-flight request, cached data is served without a network call while
it is fresh, and mutations invalidate every key under a prefix so the next
read refetches. Everything runs on a single event loop; no locking is needed.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Hashable, Optional, Tuple

from checkin_console.core.config import settings
from checkin_console.core.errors import ApiError

logger = logging.getLogger(__name__)

QueryKey = Tuple[Hashable, ...]


class QueryStatus(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


class MutationStatus(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class QueryResult:
    """Snapshot of one cache entry.

    Loading, data and error are independent: a stale value may be present
    while a refresh is running or after the refresh has failed.
    """

    data: Any = None
    error: Optional[BaseException] = None
    updated_at: Optional[float] = None
    is_fetching: bool = False
    is_stale: bool = True

    @property
    def has_data(self) -> bool:
        return self.updated_at is not None

    @property
    def is_loading(self) -> bool:
        return self.is_fetching and not self.has_data

    @property
    def status(self) -> QueryStatus:
        if self.error is not None:
            return QueryStatus.ERROR
        if self.has_data:
            return QueryStatus.SUCCESS
        return QueryStatus.PENDING


class _Entry:
    __slots__ = ("data", "error", "updated_at", "invalidated", "task", "generation", "last_used")

    def __init__(self):
        self.data: Any = None
        self.error: Optional[BaseException] = None
        self.updated_at: Optional[float] = None
        self.invalidated = False
        self.task: Optional[asyncio.Task] = None
        self.generation = 0
        self.last_used = 0.0


def _consume_exception(task: asyncio.Task) -> None:
    # Failures are re-raised to every awaiting caller; this only keeps
    # asyncio quiet when all of them went away first.
    if not task.cancelled():
        task.exception()


class QueryClient:
    """Cache of query results keyed by resource kind and parameters"""

    def __init__(
        self,
        stale_time: Optional[float] = None,
        retry: Optional[int] = None,
        retry_delay: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
        gc_time: Optional[float] = None,
        max_entries: Optional[int] = None,
    ):
        self.stale_time = settings.QUERY_STALE_SECONDS if stale_time is None else stale_time
        self.retry = settings.QUERY_RETRY if retry is None else retry
        self.retry_delay = settings.QUERY_RETRY_DELAY if retry_delay is None else retry_delay
        self.gc_time = settings.QUERY_GC_SECONDS if gc_time is None else gc_time
        self.max_entries = settings.QUERY_MAX_ENTRIES if max_entries is None else max_entries
        self.clock = clock
        self._entries: Dict[QueryKey, _Entry] = {}

    def _entry_for(self, key: QueryKey) -> _Entry:
        entry = self._entries.get(key)
        if entry is None:
            entry = self._entries[key] = _Entry()
        entry.last_used = self.clock()
        self.collect_garbage(keep=key)
        return entry

    # -------- reads --------

    async def fetch_query(
        self,
        key: QueryKey,
        fn: Callable[[], Awaitable[Any]],
        stale_time: Optional[float] = None,
        retry: Optional[int] = None,
    ) -> Any:
        """Return fresh cached data, join an identical in-flight read, or fetch"""
        entry = self._entry_for(key)

        if self._is_fresh(entry, self.stale_time if stale_time is None else stale_time):
            logger.debug(f"Cache hit for {key}")
            return entry.data

        if entry.task is None:
            logger.debug(f"Fetching {key}")
            entry.task = asyncio.ensure_future(
                self._fetch(key, entry, fn, self.retry if retry is None else retry)
            )
            entry.task.add_done_callback(_consume_exception)
        else:
            logger.debug(f"Joining in-flight request for {key}")

        return await asyncio.shield(entry.task)

    async def _fetch(self, key: QueryKey, entry: _Entry, fn, retry: int) -> Any:
        generation = entry.generation
        try:
            data = await self.run_with_retry(fn, retry, key)
        except Exception as e:
            if self._is_current(key, entry, generation):
                entry.error = e
            raise
        finally:
            if entry.task is asyncio.current_task():
                entry.task = None

        if self._is_current(key, entry, generation):
            entry.data = data
            entry.error = None
            entry.updated_at = self.clock()
            entry.invalidated = False
        else:
            logger.debug(f"Discarding response for {key}: invalidated while in flight")
        return data

    async def run_with_retry(self, fn: Callable[[], Awaitable[Any]], retry: int, label: Any = None) -> Any:
        """Call ``fn``, retrying retryable errors at most ``retry`` times"""
        attempt = 0
        while True:
            try:
                return await fn()
            except ApiError as e:
                if not e.retryable or attempt >= retry:
                    raise
                attempt += 1
                logger.warning(f"Retrying {label} ({attempt}/{retry}) after error: {e}")
                if self.retry_delay:
                    await asyncio.sleep(self.retry_delay)

    def _is_fresh(self, entry: _Entry, stale_time: float) -> bool:
        if entry.updated_at is None or entry.invalidated:
            return False
        return self.clock() - entry.updated_at < stale_time

    def _is_current(self, key: QueryKey, entry: _Entry, generation: int) -> bool:
        return self._entries.get(key) is entry and entry.generation == generation

    # -------- cache inspection and mutation --------

    def get_query_state(self, key: QueryKey) -> QueryResult:
        entry = self._entries.get(key)
        if entry is None:
            return QueryResult()
        return QueryResult(
            data=entry.data,
            error=entry.error,
            updated_at=entry.updated_at,
            is_fetching=entry.task is not None,
            is_stale=not self._is_fresh(entry, self.stale_time),
        )

    def get_query_data(self, key: QueryKey) -> Any:
        entry = self._entries.get(key)
        return entry.data if entry else None

    def set_query_data(self, key: QueryKey, data: Any) -> None:
        entry = self._entry_for(key)
        entry.data = data
        entry.error = None
        entry.updated_at = self.clock()
        entry.invalidated = False

    def invalidate_queries(self, prefix: QueryKey = ()) -> int:
        """Mark every entry under ``prefix`` stale; returns how many matched"""
        count = 0
        for key, entry in self._entries.items():
            if key[: len(prefix)] == prefix:
                entry.invalidated = True
                entry.generation += 1
                entry.task = None
                count += 1
        logger.debug(f"Invalidated {count} queries under {prefix}")
        return count

    def collect_garbage(self, keep: Optional[QueryKey] = None) -> int:
        """Evict idle entries unused for ``gc_time``, then the least recently
        used idle ones while over ``max_entries``. Entries with a request in
        flight and ``keep`` are kept. Returns how many were evicted.
        """
        now = self.clock()
        idle = [
            (entry.last_used, key) for key, entry in self._entries.items()
            if entry.task is None and key != keep
        ]
        evict = {key for last_used, key in idle if now - last_used >= self.gc_time}

        excess = len(self._entries) - len(evict) - self.max_entries
        if excess > 0:
            remaining = sorted((item for item in idle if item[1] not in evict), key=lambda item: item[0])
            evict.update(key for _, key in remaining[:excess])

        for key in evict:
            del self._entries[key]
        if evict:
            logger.debug(f"Evicted {len(evict)} unused queries")
        return len(evict)

    def clear(self) -> None:
        """Forget everything; responses still in flight are discarded"""
        self._entries.clear()
        logger.info("Query cache cleared")

    def __len__(self) -> int:
        return len(self._entries)


class Mutation:
    """A write operation with its own pending/success/error state"""

    def __init__(
        self,
        client: QueryClient,
        fn: Callable[..., Awaitable[Any]],
        on_success: Optional[Callable[..., None]] = None,
        retry: Optional[int] = None,
        name: Optional[str] = None,
    ):
        self.client = client
        self.fn = fn
        self.on_success = on_success
        if retry is None:
            retry = settings.MUTATION_RETRY
        self.retry = min(retry, client.retry)
        self.name = name or getattr(fn, "__name__", "mutation")
        self.reset()

    def reset(self) -> None:
        self.status = MutationStatus.IDLE
        self.data: Any = None
        self.error: Optional[BaseException] = None

    @property
    def is_pending(self) -> bool:
        return self.status == MutationStatus.PENDING

    async def __call__(self, *args, **kwargs) -> Any:
        self.status = MutationStatus.PENDING
        self.error = None
        try:
            result = await self.client.run_with_retry(
                lambda: self.fn(*args, **kwargs), self.retry, self.name
            )
        except Exception as e:
            self.status = MutationStatus.ERROR
            self.error = e
            logger.warning(f"Mutation {self.name} failed: {e}")
            raise

        self.data = result
        self.status = MutationStatus.SUCCESS
        if self.on_success:
            self.on_success(result, *args, **kwargs)
        return result


class QueryObserver:
    """Follows one query for a view whose parameters can change.

    Each refresh remembers the key it was issued for. If the view has moved
    to other parameters by the time the response arrives, the response stays
    in the cache under its own key but is not applied to ``result``.
    ``enabled`` receives the parameters; while it returns false, refreshes
    send nothing.
    """

    def __init__(
        self,
        client: QueryClient,
        key_fn: Callable[..., QueryKey],
        fetch_fn: Callable[..., Awaitable[Any]],
        *params: Any,
        enabled: Optional[Callable[..., bool]] = None,
    ):
        self.client = client
        self._key_fn = key_fn
        self._fetch_fn = fetch_fn
        self._enabled = enabled
        self.params: Tuple[Any, ...] = params
        self.result = client.get_query_state(self.key)

    @property
    def key(self) -> QueryKey:
        return self._key_fn(*self.params)

    @property
    def is_enabled(self) -> bool:
        return self._enabled is None or bool(self._enabled(*self.params))

    def set_params(self, *params: Any) -> QueryResult:
        self.params = params
        self.result = self.client.get_query_state(self.key)
        return self.result

    async def refresh(self) -> QueryResult:
        if not self.is_enabled:
            return self.result

        params = self.params
        key = self._key_fn(*params)
        self.result = replace(self.client.get_query_state(key), is_fetching=True)
        try:
            await self.client.fetch_query(key, lambda: self._fetch_fn(*params))
        except ApiError as e:
            # Recorded on the cache entry and surfaced through ``result.error``
            logger.warning(f"Query {key} failed: {e}")

        if self.key != key:
            logger.debug(f"Discarding response for {key}: view moved to {self.key}")
            return self.result

        self.result = self.client.get_query_state(key)
        return self.result
