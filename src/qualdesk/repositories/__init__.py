"""Repository layer - data access abstractions and implementations."""

from qualdesk.repositories.protocols import (
    QualificationRepository,
    AuditLogRepository,
)

__all__ = [
    "QualificationRepository",
    "AuditLogRepository",
]
