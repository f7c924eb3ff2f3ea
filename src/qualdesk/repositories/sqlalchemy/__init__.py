"""SQLAlchemy repository implementations."""

from qualdesk.repositories.sqlalchemy.database import (
    get_engine,
    get_session_factory,
    init_db,
    reset_database,
    Base,
)
from qualdesk.repositories.sqlalchemy.qualification_repo import SqlAlchemyQualificationRepository
from qualdesk.repositories.sqlalchemy.audit_repo import SqlAlchemyAuditLogRepository

__all__ = [
    "get_engine",
    "get_session_factory",
    "init_db",
    "reset_database",
    "Base",
    "SqlAlchemyQualificationRepository",
    "SqlAlchemyAuditLogRepository",
]
