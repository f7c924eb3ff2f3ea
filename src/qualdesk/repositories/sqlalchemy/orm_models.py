"""SQLAlchemy ORM model definitions."""

from decimal import Decimal

from sqlalchemy import (
    Column,
    String,
    DateTime,
    Boolean,
    Text,
    Numeric,
    Index,
    Enum as SqlEnum,
)

from qualdesk.repositories.sqlalchemy.database import Base
from qualdesk.domain.models.enums import AuditAction, AuditResource


class QualificationORM(Base):
    """SQLAlchemy model for Qualification."""

    __tablename__ = "qualifications"

    qualification_id = Column(String(36), primary_key=True)
    owner_id = Column(String(64), nullable=False, index=True)
    instrument_type = Column(String(64), nullable=False)
    market = Column(String(64), nullable=False)
    period = Column(String(16), nullable=False)
    amount_value = Column(Numeric(precision=18, scale=2), nullable=False, default=Decimal("0"))
    amount_currency = Column(String(3), nullable=False, default="CLP")
    unregistered = Column(Boolean, nullable=False, default=False)
    factors_json = Column(Text, nullable=True)
    taxpayer_id = Column(String(32), nullable=True)
    contributor_id = Column(String(64), nullable=True)
    qualification_type = Column(String(64), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=True)
    last_modified_at = Column(DateTime(timezone=True), nullable=True)


class AuditLogORM(Base):
    """SQLAlchemy model for AuditEntry (append-only)."""

    __tablename__ = "audit_logs"
    __table_args__ = (Index("ix_audit_logs_entity_time", "entity_id", "timestamp"),)

    audit_id = Column(String(36), primary_key=True)
    action = Column(SqlEnum(AuditAction), nullable=False)
    resource = Column(SqlEnum(AuditResource), nullable=False)
    actor_id = Column(String(64), nullable=False)
    actor_email = Column(String(255), nullable=False, default="")
    actor_name = Column(String(255), nullable=False, default="")
    timestamp = Column(DateTime(timezone=True), nullable=False)
    entity_id = Column(String(36), nullable=True)
    snapshot_json = Column(Text, nullable=True)
    details = Column(Text, nullable=False, default="")
    metadata_json = Column(Text, nullable=True)
