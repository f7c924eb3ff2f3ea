"""Audit log repository protocol."""

from typing import Any, Protocol, Optional

from qualdesk.domain.models import AuditEntry


class AuditLogRepository(Protocol):
    """Append-only audit trail of user actions."""

    async def record_deletion(
        self,
        actor_id: str,
        actor_email: str,
        actor_name: str,
        entity_id: str,
        snapshot: dict[str, Any],
    ) -> AuditEntry:
        """Record that a qualification was deleted, with its last state."""
        ...

    async def record_export(
        self,
        actor_id: str,
        actor_email: str,
        actor_name: str,
        row_count: int,
        details: str = "",
        metadata: Optional[dict[str, Any]] = None,
    ) -> AuditEntry:
        """Record a report export."""
        ...

    async def list_by_entity(self, entity_id: str) -> list[AuditEntry]:
        """List audit entries for one entity, oldest first."""
        ...
