"""Repository protocol definitions (interfaces)."""

from qualdesk.repositories.protocols.qualification_repo import QualificationRepository
from qualdesk.repositories.protocols.audit_repo import AuditLogRepository

__all__ = [
    "QualificationRepository",
    "AuditLogRepository",
]
