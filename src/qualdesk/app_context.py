"""Application context for in-process service management.

Holds the process-wide collaborators (database-backed repositories, cache
store, event bus) and one QualificationsSession per owner. The HTTP layer
reaches everything through here.
"""

import logging
from collections import OrderedDict
from typing import Optional

from qualdesk.cache import CacheStore
from qualdesk.config.settings import Settings, get_settings, set_settings
from qualdesk.csv import CsvExporter
from qualdesk.domain.models import Actor, MutationPhase
from qualdesk.events import EventBus
from qualdesk.repositories.protocols import AuditLogRepository, QualificationRepository
from qualdesk.repositories.sqlalchemy import (
    SqlAlchemyAuditLogRepository,
    SqlAlchemyQualificationRepository,
    get_session_factory,
    init_db,
    reset_database,
)
from qualdesk.services import QualificationsSession

logger = logging.getLogger(__name__)


class AppContext:
    """
    Application context providing access to sessions and shared services.

    Repositories may be injected (tests do this); otherwise initialize()
    creates the SQLAlchemy ones on the configured database.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        data_source: Optional[QualificationRepository] = None,
        audit_log: Optional[AuditLogRepository] = None,
        store: Optional[CacheStore] = None,
        bus: Optional[EventBus] = None,
    ):
        self._settings = settings
        self._data_source = data_source
        self._audit_log = audit_log
        self._store = store
        self._bus = bus
        self._owns_database = False
        self._sessions: OrderedDict[str, QualificationsSession] = OrderedDict()
        self._csv_exporter = CsvExporter()
        self._initialized = False

    async def initialize(self) -> None:
        """Prepare the database (when needed), cache store and bus."""
        if self._settings is not None:
            set_settings(self._settings)
        settings = self.settings

        if self._data_source is None or self._audit_log is None:
            await init_db(settings.get_database_url())
            self._owns_database = True
            session_factory = get_session_factory()
            if self._data_source is None:
                self._data_source = SqlAlchemyQualificationRepository(session_factory)
            if self._audit_log is None:
                self._audit_log = SqlAlchemyAuditLogRepository(session_factory)

        if self._store is None:
            self._store = CacheStore(default_ttl_seconds=settings.cache_ttl_seconds)
        self._store.init()
        if self._bus is None:
            self._bus = EventBus()

        self._initialized = True
        logger.info("Application context initialized")

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def settings(self) -> Settings:
        return self._settings or get_settings()

    @property
    def store(self) -> CacheStore:
        self._ensure_initialized()
        return self._store

    @property
    def bus(self) -> EventBus:
        self._ensure_initialized()
        return self._bus

    @property
    def data_source(self) -> QualificationRepository:
        self._ensure_initialized()
        return self._data_source

    @property
    def audit_log(self) -> AuditLogRepository:
        self._ensure_initialized()
        return self._audit_log

    @property
    def csv_exporter(self) -> CsvExporter:
        return self._csv_exporter

    def session_for(self, owner_id: str, actor: Optional[Actor] = None) -> QualificationsSession:
        """
        Get or create the working session for owner_id.

        At most settings.max_sessions are kept; opening one more closes the
        least recently used session that has no delete pending.
        """
        self._ensure_initialized()
        session = self._sessions.get(owner_id)
        if session is not None:
            self._sessions.move_to_end(owner_id)
        else:
            settings = self.settings
            session = QualificationsSession(
                owner_id=owner_id,
                data_source=self._data_source,
                audit_log=self._audit_log,
                store=self._store,
                bus=self._bus,
                actor=actor or Actor(actor_id=owner_id),
                page_size=settings.page_size,
                cache_ttl_seconds=settings.cache_ttl_seconds,
                stats_ttl_seconds=settings.stats_cache_ttl_seconds,
                assistant_row_limit=settings.assistant_row_limit,
                exporter=self._csv_exporter,
            )
            self._sessions[owner_id] = session
            logger.debug("Opened session for owner %s", owner_id)
            self._evict_idle_sessions(keep=owner_id)
        return session

    def close_session(self, owner_id: str) -> bool:
        """Close and forget the session for owner_id. Returns False if none was open."""
        session = self._sessions.pop(owner_id, None)
        if session is None:
            return False
        session.close()
        logger.debug("Closed session for owner %s", owner_id)
        return True

    def sessions(self) -> list[QualificationsSession]:
        return list(self._sessions.values())

    async def close(self) -> None:
        """Clean up resources."""
        for session in self._sessions.values():
            session.close()
        self._sessions.clear()
        if self._store is not None:
            self._store.reset()
        if self._bus is not None:
            self._bus.clear()
        if self._owns_database:
            await reset_database()
            self._owns_database = False
        self._initialized = False

    def _evict_idle_sessions(self, keep: str) -> None:
        limit = self.settings.max_sessions
        for owner_id in list(self._sessions):
            if len(self._sessions) <= limit:
                break
            if owner_id == keep:
                continue
            if self._sessions[owner_id].coordinator.phase == MutationPhase.IDLE:
                self.close_session(owner_id)

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            raise RuntimeError("AppContext.initialize() has not been awaited")


# Global application context
_app_context: Optional[AppContext] = None


def get_app_context() -> AppContext:
    """Get or create the global application context."""
    global _app_context
    if _app_context is None:
        _app_context = AppContext()
    return _app_context


def set_app_context(context: Optional[AppContext]) -> None:
    """Set the global application context."""
    global _app_context
    _app_context = context
