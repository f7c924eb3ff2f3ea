"""Cache entry model."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any


@dataclass(frozen=True)
class CacheEntry:
    """
    Time-boxed cached value.

    Freshness is evaluated lazily by the reader; an entry is never expired
    in place.
    """

    value: Any
    stored_at: datetime
    ttl: timedelta

    def is_fresh(self, now: datetime) -> bool:
        """Return True while now is within the TTL window from storage time."""
        return now - self.stored_at < self.ttl

    def age(self, now: datetime) -> timedelta:
        return now - self.stored_at
