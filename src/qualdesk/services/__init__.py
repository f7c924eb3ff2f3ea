"""Business logic services."""

from qualdesk.services.assistant_context import AssistantContext
from qualdesk.services.stats_service import StatsService, compute_stats
from qualdesk.services.qualifications_session import (
    QualificationsSession,
    LOAD_ERROR_MESSAGE,
    qualifications_cache_key,
)

__all__ = [
    "AssistantContext",
    "StatsService",
    "compute_stats",
    "QualificationsSession",
    "LOAD_ERROR_MESSAGE",
    "qualifications_cache_key",
]
