"""Read-only context handed to the chat assistant."""

from typing import Any, Iterable, Optional

from qualdesk.core.timezone import now_local
from qualdesk.domain.models import Qualification
from qualdesk.domain.views import QualificationStats

DEFAULT_ROW_LIMIT = 100


class AssistantContext:
    """
    Latest derived view and aggregate stats, as seen by the chat assistant.

    The assistant only reads from here; it has no path back to the records.
    """

    def __init__(self, row_limit: int = DEFAULT_ROW_LIMIT):
        self._row_limit = row_limit
        self._rows: tuple[Qualification, ...] = ()
        self._stats: Optional[QualificationStats] = None
        self._rows_updated_at = None

    @property
    def row_limit(self) -> int:
        return self._row_limit

    @property
    def rows(self) -> tuple[Qualification, ...]:
        return self._rows

    @property
    def stats(self) -> Optional[QualificationStats]:
        return self._stats

    def publish_rows(self, rows: Iterable[Qualification]) -> None:
        rows = tuple(rows)
        self._rows = rows[: self._row_limit]
        self._rows_updated_at = now_local()

    def publish_stats(self, stats: QualificationStats) -> None:
        self._stats = stats

    def snapshot(self) -> dict[str, Any]:
        """JSON-safe view of the context."""
        stats = self._stats
        return {
            "rows": [row.to_snapshot() for row in self._rows],
            "row_count": len(self._rows),
            "rows_updated_at": self._rows_updated_at.isoformat() if self._rows_updated_at else None,
            "stats": None if stats is None else {
                "total_qualifications": stats.total_qualifications,
                "validated_factors": stats.validated_factors,
                "success_rate": stats.success_rate,
                "amount_by_currency": {k: str(v) for k, v in stats.amount_by_currency.items()},
                "by_market": dict(stats.by_market),
                "by_instrument": dict(stats.by_instrument),
            },
        }
