"""Audit trail domain models."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from qualdesk.domain.models.enums import AuditAction, AuditResource


@dataclass(frozen=True)
class Actor:
    """Identity of the operator performing an action."""

    actor_id: str
    email: str = ""
    first_name: str = ""
    last_name: str = ""

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip() or "User"


@dataclass(frozen=True)
class AuditEntry:
    """
    Append-only audit record.

    Deletions carry a snapshot of the record as it was before removal.
    """

    audit_id: str
    action: AuditAction
    resource: AuditResource
    actor_id: str
    actor_email: str
    actor_name: str
    timestamp: datetime
    entity_id: Optional[str] = None
    snapshot: Optional[dict[str, Any]] = None
    details: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if isinstance(self.action, str):
            object.__setattr__(self, "action", AuditAction(self.action))
        if isinstance(self.resource, str):
            object.__setattr__(self, "resource", AuditResource(self.resource))
