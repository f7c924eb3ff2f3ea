"""Time-boxed in-memory cache shared by fetch subscriptions."""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional

from qualdesk.core.timezone import now_local
from qualdesk.domain.models import CacheEntry

if TYPE_CHECKING:
    from qualdesk.cache.subscription import FetchSubscription

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
FetchFn = Callable[[], Awaitable[Any]]

DEFAULT_TTL_SECONDS = 5 * 60


class CancelToken:
    """Marks one fetch as superseded; its resolution is then dropped."""

    __slots__ = ("cancelled",)

    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class _InFlightFetch:
    """Pending fetch for one key, shared by every concurrent reader."""

    def __init__(self, task: "asyncio.Future[Any]", generation: int, ttl: timedelta):
        self.task = task
        self.generation = generation
        self.ttl = ttl
        self.written = False


class CacheStore:
    """
    Keyed store of time-boxed values.

    Owns freshness (checked lazily on read), invalidation and one in-flight
    slot per key so that concurrent readers share a single fetch and a single
    cache write. Each application context constructs its own instance.
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        default_ttl_seconds: int = DEFAULT_TTL_SECONDS,
    ):
        self._clock = clock or now_local
        self._default_ttl = timedelta(seconds=default_ttl_seconds)
        self._entries: dict[str, CacheEntry] = {}
        self._inflight: dict[str, _InFlightFetch] = {}
        # Bumped on invalidation; a fetch started under an older generation
        # never writes its result.
        self._generations: dict[str, int] = {}
        self._subscriptions: list["FetchSubscription"] = []
        self._initialized = False

    # Lifecycle

    def init(self) -> "CacheStore":
        """Prepare an empty store."""
        self._entries.clear()
        self._inflight.clear()
        self._initialized = True
        return self

    def reset(self) -> None:
        """Drop every entry and in-flight fetch; bound subscriptions refetch on next read."""
        self.clear_all()
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def default_ttl(self) -> timedelta:
        return self._default_ttl

    def now(self) -> datetime:
        return self._clock()

    # Entries

    def get_entry(self, key: str) -> Optional[CacheEntry]:
        """Return the entry for key regardless of freshness."""
        return self._entries.get(key)

    def get_fresh(self, key: str) -> Optional[CacheEntry]:
        """Return the entry for key only if it is still within its TTL."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not entry.is_fresh(self.now()):
            logger.debug("Cache entry '%s' is stale", key)
            return None
        return entry

    def put(self, key: str, value: Any, ttl: Optional[timedelta] = None) -> CacheEntry:
        """Store value under key, stamped with the current time."""
        entry = CacheEntry(value=value, stored_at=self.now(), ttl=ttl or self._default_ttl)
        self._entries[key] = entry
        return entry

    def invalidate(self, key: str) -> bool:
        """
        Delete the entry for key and supersede any in-flight fetch for it.

        Subscriptions bound to key drop their pending fetch and refetch on
        their next read. Returns True if an entry was removed.
        """
        removed = self._entries.pop(key, None) is not None
        self._supersede(key)
        for subscription in list(self._subscriptions):
            if subscription.key == key:
                subscription.cancel_pending()
        logger.debug("Invalidated cache key '%s' (entry removed: %s)", key, removed)
        return removed

    def clear_all(self) -> None:
        """Delete every entry; all bound subscriptions refetch on next read."""
        for key in list(self._inflight):
            self._supersede(key)
        self._entries.clear()
        for subscription in list(self._subscriptions):
            subscription.cancel_pending()
        logger.debug("Cleared all cache entries")

    def keys(self) -> list[str]:
        return list(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    # Subscriptions

    def bind(self, subscription: "FetchSubscription") -> None:
        if subscription not in self._subscriptions:
            self._subscriptions.append(subscription)

    def unbind(self, subscription: "FetchSubscription") -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    def subscriptions_for(self, key: str) -> list["FetchSubscription"]:
        return [s for s in self._subscriptions if s.key == key]

    # Fetching

    def is_fetching(self, key: str) -> bool:
        return key in self._inflight

    async def fetch(
        self,
        key: str,
        fetch_fn: FetchFn,
        token: CancelToken,
        ttl: Optional[timedelta] = None,
    ) -> Any:
        """
        Run fetch_fn for key, or join the fetch already in flight for it.

        The first reader to resume with a live token writes the result; a
        reader whose token was cancelled gets the value back but never writes
        it. Failures propagate to every reader and are never stored.
        """
        slot = self._inflight.get(key)
        if slot is None:
            slot = _InFlightFetch(
                task=asyncio.ensure_future(fetch_fn()),
                generation=self._generations.get(key, 0),
                ttl=ttl or self._default_ttl,
            )
            self._inflight[key] = slot
            logger.debug("Started fetch for '%s'", key)
        else:
            logger.debug("Joined in-flight fetch for '%s'", key)

        try:
            value = await asyncio.shield(slot.task)
        finally:
            if self._inflight.get(key) is slot and slot.task.done():
                del self._inflight[key]

        if token.cancelled:
            logger.debug("Dropped superseded fetch result for '%s'", key)
            return value
        if not slot.written and slot.generation == self._generations.get(key, 0):
            self.put(key, value, slot.ttl)
            slot.written = True
        return value

    def _supersede(self, key: str) -> None:
        self._generations[key] = self._generations.get(key, 0) + 1
        self._inflight.pop(key, None)
