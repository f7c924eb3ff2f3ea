"""In-memory cache with per-consumer fetch subscriptions."""

from qualdesk.cache.store import CacheStore, CancelToken, DEFAULT_TTL_SECONDS
from qualdesk.cache.subscription import FetchSubscription, FetchState

__all__ = [
    "CacheStore",
    "CancelToken",
    "DEFAULT_TTL_SECONDS",
    "FetchSubscription",
    "FetchState",
]
