"""Domain layer - pure models with no external dependencies."""

from qualdesk.domain.models import (
    Amount,
    Qualification,
    Actor,
    AuditEntry,
    CacheEntry,
    StatusFilter,
    SortField,
    SortDirection,
    AuditAction,
    AuditResource,
    MutationPhase,
)

__all__ = [
    "Amount",
    "Qualification",
    "Actor",
    "AuditEntry",
    "CacheEntry",
    "StatusFilter",
    "SortField",
    "SortDirection",
    "AuditAction",
    "AuditResource",
    "MutationPhase",
]
