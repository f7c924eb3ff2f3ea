"""Domain models package."""

from qualdesk.domain.models.enums import (
    StatusFilter,
    SortField,
    SortDirection,
    AuditAction,
    AuditResource,
    MutationPhase,
)
from qualdesk.domain.models.qualification import Amount, Qualification, FACTOR_KEYS
from qualdesk.domain.models.audit import Actor, AuditEntry
from qualdesk.domain.models.cache import CacheEntry

__all__ = [
    "StatusFilter",
    "SortField",
    "SortDirection",
    "AuditAction",
    "AuditResource",
    "MutationPhase",
    "Amount",
    "Qualification",
    "FACTOR_KEYS",
    "Actor",
    "AuditEntry",
    "CacheEntry",
]
