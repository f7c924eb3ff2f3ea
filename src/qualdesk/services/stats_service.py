"""Aggregate statistics over an owner's qualifications."""

import logging
from collections import Counter, defaultdict
from decimal import Decimal
from typing import Callable, Iterable, Optional

from qualdesk.cache import CacheStore, FetchSubscription
from qualdesk.domain.models import Qualification
from qualdesk.domain.views import QualificationStats
from qualdesk.events import EventBus, Signal
from qualdesk.repositories.protocols import QualificationRepository
from qualdesk.services.assistant_context import AssistantContext

logger = logging.getLogger(__name__)


def stats_cache_key(owner_id: str) -> str:
    return f"stats-{owner_id}"


def compute_stats(records: Iterable[Qualification]) -> QualificationStats:
    """
    Summarize records.

    success_rate is the share of records whose factors add up to at most 1,
    as a percentage rounded to one decimal; an empty collection scores 100.
    """
    records = list(records)
    total = len(records)
    validated = sum(1 for q in records if q.has_valid_factors)

    amounts: dict[str, Decimal] = defaultdict(lambda: Decimal("0"))
    for q in records:
        amounts[q.amount.currency] += q.amount.value

    return QualificationStats(
        total_qualifications=total,
        validated_factors=validated,
        success_rate=round(validated / total * 100, 1) if total else 100.0,
        amount_by_currency=dict(amounts),
        by_market=dict(Counter(q.market for q in records)),
        by_instrument=dict(Counter(q.instrument_type for q in records)),
    )


class StatsService:
    """
    Cached stats for one owner.

    Re-reads when STATS_CHANGED is published and hands every new value to
    the assistant context. Publishers invalidate the stats keys they touched
    first, so owners whose records did not change are served from the cache.
    """

    def __init__(
        self,
        data_source: QualificationRepository,
        store: CacheStore,
        bus: EventBus,
        owner_id: str,
        assistant: Optional[AssistantContext] = None,
        ttl_seconds: Optional[int] = None,
    ):
        self._data_source = data_source
        self._owner_id = owner_id
        self._assistant = assistant
        self._subscription: FetchSubscription[QualificationStats] = FetchSubscription(
            store,
            stats_cache_key(owner_id),
            self._fetch,
            ttl_seconds=ttl_seconds,
        )
        self._unsubscribe: Callable[[], None] = bus.subscribe(
            Signal.STATS_CHANGED, self.read
        )

    @property
    def subscription(self) -> FetchSubscription[QualificationStats]:
        return self._subscription

    async def read(self) -> QualificationStats:
        """Current stats; empty stats if nothing could be loaded yet."""
        stats = await self._subscription.read()
        return self._published(stats)

    async def refresh(self) -> QualificationStats:
        stats = await self._subscription.refresh()
        return self._published(stats)

    def close(self) -> None:
        self._unsubscribe()
        self._subscription.close()

    async def _fetch(self) -> QualificationStats:
        records = await self._data_source.list_by_owner(self._owner_id)
        stats = compute_stats(records)
        logger.debug(
            "Computed stats for %s: %d record(s), %.1f%% valid",
            self._owner_id,
            stats.total_qualifications,
            stats.success_rate,
        )
        return stats

    def _published(self, stats: Optional[QualificationStats]) -> QualificationStats:
        stats = stats or QualificationStats()
        if self._assistant is not None:
            self._assistant.publish_stats(stats)
        return stats
