"""SQLAlchemy implementation of AuditLogRepository."""

import json
import logging
import uuid
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from qualdesk.core.timezone import now_local
from qualdesk.domain.models import AuditAction, AuditEntry, AuditResource
from qualdesk.repositories.sqlalchemy.orm_models import AuditLogORM

logger = logging.getLogger(__name__)


class SqlAlchemyAuditLogRepository:
    """SQLAlchemy-backed append-only audit log."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def record_deletion(
        self,
        actor_id: str,
        actor_email: str,
        actor_name: str,
        entity_id: str,
        snapshot: dict[str, Any],
    ) -> AuditEntry:
        entry = AuditEntry(
            audit_id=str(uuid.uuid4()),
            action=AuditAction.DELETE,
            resource=AuditResource.QUALIFICATION,
            actor_id=actor_id,
            actor_email=actor_email,
            actor_name=actor_name,
            timestamp=now_local(),
            entity_id=entity_id,
            snapshot=snapshot,
            details=f"Deleted qualification {entity_id}",
        )
        return await self._append(entry)

    async def record_export(
        self,
        actor_id: str,
        actor_email: str,
        actor_name: str,
        row_count: int,
        details: str = "",
        metadata: Optional[dict[str, Any]] = None,
    ) -> AuditEntry:
        entry = AuditEntry(
            audit_id=str(uuid.uuid4()),
            action=AuditAction.EXPORT,
            resource=AuditResource.REPORT,
            actor_id=actor_id,
            actor_email=actor_email,
            actor_name=actor_name,
            timestamp=now_local(),
            details=details or f"Exported {row_count} qualification(s)",
            metadata={"row_count": row_count, **(metadata or {})},
        )
        return await self._append(entry)

    async def list_by_entity(self, entity_id: str) -> list[AuditEntry]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(AuditLogORM)
                .where(AuditLogORM.entity_id == entity_id)
                .order_by(AuditLogORM.timestamp)
            )
            return [self._to_domain(row) for row in result.scalars().all()]

    async def _append(self, entry: AuditEntry) -> AuditEntry:
        async with self._session_factory() as session:
            session.add(self._to_orm(entry))
            await session.commit()
        logger.info(
            "Audit %s %s by %s (entity=%s)",
            entry.action.value,
            entry.resource.value,
            entry.actor_id,
            entry.entity_id,
        )
        return entry

    @staticmethod
    def _to_domain(orm_entry: AuditLogORM) -> AuditEntry:
        return AuditEntry(
            audit_id=orm_entry.audit_id,
            action=orm_entry.action,
            resource=orm_entry.resource,
            actor_id=orm_entry.actor_id,
            actor_email=orm_entry.actor_email,
            actor_name=orm_entry.actor_name,
            timestamp=orm_entry.timestamp,
            entity_id=orm_entry.entity_id,
            snapshot=json.loads(orm_entry.snapshot_json) if orm_entry.snapshot_json else None,
            details=orm_entry.details or "",
            metadata=json.loads(orm_entry.metadata_json) if orm_entry.metadata_json else {},
        )

    @staticmethod
    def _to_orm(entry: AuditEntry) -> AuditLogORM:
        return AuditLogORM(
            audit_id=entry.audit_id,
            action=entry.action,
            resource=entry.resource,
            actor_id=entry.actor_id,
            actor_email=entry.actor_email,
            actor_name=entry.actor_name,
            timestamp=entry.timestamp,
            entity_id=entry.entity_id,
            snapshot_json=json.dumps(entry.snapshot) if entry.snapshot is not None else None,
            details=entry.details,
            metadata_json=json.dumps(entry.metadata) if entry.metadata else None,
        )
