"""Per-consumer binding of a cache key to an async fetch function."""

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, Generic, Optional, TypeVar

from qualdesk.cache.store import CacheStore, CancelToken, FetchFn
from qualdesk.core.exceptions import FetchError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class FetchState(Generic[T]):
    """What a subscription currently publishes."""

    data: Optional[T] = None
    loading: bool = False
    error: Optional[FetchError] = None


Listener = Callable[[FetchState], None]


class FetchSubscription(Generic[T]):
    """
    Reads a key through the cache store and republishes data, loading, error.

    A fresh entry is served without calling fetch_fn. Otherwise fetch_fn runs
    (or an in-flight fetch for the key is joined) and the outcome is published.
    A pending fetch is superseded once the subscription starts another one or
    is rebound, invalidated or closed. Superseded outcomes are neither
    published nor stored.
    """

    def __init__(
        self,
        store: CacheStore,
        key: str,
        fetch_fn: FetchFn,
        ttl_seconds: Optional[int] = None,
    ):
        self._store = store
        self._key = key
        self._fetch_fn = fetch_fn
        self._ttl = timedelta(seconds=ttl_seconds) if ttl_seconds is not None else store.default_ttl
        self._data: Optional[T] = None
        self._loading = False
        self._error: Optional[FetchError] = None
        self._token: Optional[CancelToken] = None
        self._listeners: list[Listener] = []
        self._closed = False
        store.bind(self)

    @property
    def key(self) -> str:
        return self._key

    @property
    def data(self) -> Optional[T]:
        return self._data

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def error(self) -> Optional[FetchError]:
        return self._error

    @property
    def closed(self) -> bool:
        return self._closed

    def state(self) -> FetchState:
        return FetchState(data=self._data, loading=self._loading, error=self._error)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener called with the new state after every publish."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def read(self) -> Optional[T]:
        """
        Return cached data if fresh, otherwise fetch it.

        On failure the error is published and the previous data is returned;
        the failure is not raised.
        """
        if self._closed:
            raise RuntimeError(f"Subscription for '{self._key}' is closed")

        entry = self._store.get_fresh(self._key)
        if entry is not None:
            self.cancel_pending()
            self._data = entry.value
            self._loading = False
            self._error = None
            self._publish()
            return self._data

        return await self._fetch()

    async def refresh(self) -> Optional[T]:
        """Drop the cached entry for this key and fetch again."""
        self.invalidate()
        return await self.read()

    def invalidate(self, key: Optional[str] = None) -> bool:
        """Delete the entry for key (default: this subscription's key)."""
        return self._store.invalidate(key or self._key)

    def clear_all(self) -> None:
        """Delete every cache entry."""
        self._store.clear_all()

    def rebind(self, key: str, fetch_fn: Optional[FetchFn] = None) -> None:
        """Point the subscription at another key; the next read uses it."""
        self.cancel_pending()
        self._key = key
        if fetch_fn is not None:
            self._fetch_fn = fetch_fn

    def cancel_pending(self) -> None:
        """Supersede the fetch in flight for this subscription, if any."""
        if self._token is not None:
            self._token.cancel()
            self._token = None

    def close(self) -> None:
        """Tear the subscription down; a pending fetch is discarded."""
        self.cancel_pending()
        self._listeners.clear()
        self._store.unbind(self)
        self._closed = True

    async def _fetch(self) -> Optional[T]:
        self.cancel_pending()
        token = CancelToken()
        self._token = token
        key = self._key

        self._loading = True
        self._error = None
        self._publish()

        try:
            value = await self._store.fetch(key, self._fetch_fn, token, ttl=self._ttl)
        except Exception as exc:
            if token.cancelled:
                logger.debug("Ignoring failure of superseded fetch for '%s'", key)
                return self._data
            logger.warning("Fetch for '%s' failed: %s", key, exc, exc_info=True)
            self._token = None
            self._loading = False
            self._error = exc if isinstance(exc, FetchError) else FetchError(key, exc)
            self._publish()
            return self._data

        if token.cancelled:
            return self._data

        self._token = None
        self._data = value
        self._loading = False
        self._error = None
        self._publish()
        return value

    def _publish(self) -> None:
        state = self.state()
        for listener in list(self._listeners):
            listener(state)

