"""
Pytest configuration and fixtures for qualification data layer tests.

This module provides:
- Deterministic in-memory data source and audit log fakes
- A manual clock for cache freshness tests
- Factory helpers for qualifications
- Cache, bus, pipeline, coordinator and session fixtures
- FastAPI TestClient wired to the fakes
"""

import asyncio
import uuid
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Callable, Iterable, Optional

import pytest
from fastapi.testclient import TestClient

from qualdesk.app_context import AppContext, set_app_context
from qualdesk.cache import CacheStore
from qualdesk.config.settings import Settings, reset_settings
from qualdesk.core.exceptions import NotFoundError, PermissionDeniedError, UnavailableError
from qualdesk.core.timezone import LOCAL_TZ
from qualdesk.domain.models import (
    Actor,
    Amount,
    AuditAction,
    AuditEntry,
    AuditResource,
    Qualification,
)
from qualdesk.events import EventBus
from qualdesk.selection import SelectionModel
from qualdesk.mutation import BulkMutationCoordinator
from qualdesk.services import QualificationsSession


OWNER_ID = "broker-1"


# =============================================================================
# TIME HELPERS
# =============================================================================


def local_datetime(
    year: int,
    month: int,
    day: int,
    hour: int = 10,
    minute: int = 0,
    second: int = 0,
) -> datetime:
    """Create a localized datetime in America/Santiago."""
    return LOCAL_TZ.localize(datetime(year, month, day, hour, minute, second))


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or local_datetime(2024, 6, 15, 9, 0, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> ManualClock:
    """Manual clock starting at 2024-06-15 09:00 local time."""
    return ManualClock()


# =============================================================================
# FACTORIES
# =============================================================================


def make_qualification(
    qualification_id: Optional[str] = None,
    owner_id: str = OWNER_ID,
    instrument_type: str = "Acciones",
    market: str = "ACN",
    period: str = "2024",
    amount: Any = "1000",
    currency: str = "CLP",
    unregistered: bool = False,
    factors: Optional[dict[str, str]] = None,
    taxpayer_id: Optional[str] = "12.345.678-5",
    qualification_type: Optional[str] = "Dividendo",
    last_modified_at: Optional[datetime] = None,
) -> Qualification:
    """Build a Qualification with sensible defaults."""
    return Qualification(
        qualification_id=qualification_id or uuid.uuid4().hex[:12],
        owner_id=owner_id,
        instrument_type=instrument_type,
        market=market,
        period=period,
        amount=Amount(value=Decimal(str(amount)), currency=currency),
        unregistered=unregistered,
        factors={k: Decimal(v) for k, v in (factors or {"factor8": "0.25"}).items()},
        taxpayer_id=taxpayer_id,
        qualification_type=qualification_type,
        created_at=local_datetime(2024, 1, 10),
        last_modified_at=last_modified_at or local_datetime(2024, 6, 1),
    )


def make_batch(count: int, prefix: str = "q", **overrides) -> list[Qualification]:
    """Build count qualifications with ids prefix-000, prefix-001, ..."""
    return [
        make_qualification(
            qualification_id=f"{prefix}-{i:03d}",
            amount=str(100 * (i + 1)),
            last_modified_at=local_datetime(2024, 6, 1) + timedelta(minutes=i),
            **overrides,
        )
        for i in range(count)
    ]


@pytest.fixture
def qualification_factory() -> Callable[..., Qualification]:
    """Factory for creating test qualifications."""
    return make_qualification


# =============================================================================
# COLLABORATOR FAKES
# =============================================================================


class InMemoryQualificationSource:
    """
    Deterministic in-memory data source.

    - list_calls / delete_calls count remote operations
    - gate, when set, makes list_by_owner wait until it is released
    - failing_ids make delete raise UnavailableError for those ids
    - forbidden_ids make delete raise PermissionDeniedError
    - fail_list makes list_by_owner raise ConnectionError
    """

    def __init__(self, records: Iterable[Qualification] = ()):
        self.records: dict[str, Qualification] = {q.qualification_id: q for q in records}
        self.list_calls = 0
        self.delete_calls: list[str] = []
        self.gate: Optional[asyncio.Event] = None
        self.failing_ids: set[str] = set()
        self.forbidden_ids: set[str] = set()
        self.fail_list = False

    async def list_by_owner(self, owner_id: str) -> list[Qualification]:
        self.list_calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_list:
            raise ConnectionError("Network unavailable")
        return [q for q in self.records.values() if q.owner_id == owner_id]

    async def delete(self, qualification_id: str) -> None:
        self.delete_calls.append(qualification_id)
        if qualification_id in self.failing_ids:
            raise UnavailableError(f"Could not delete {qualification_id}")
        if qualification_id in self.forbidden_ids:
            raise PermissionDeniedError("Qualification", qualification_id)
        if qualification_id not in self.records:
            raise NotFoundError("Qualification", qualification_id)
        del self.records[qualification_id]

    async def create(self, qualification: Qualification) -> Qualification:
        self.records[qualification.qualification_id] = qualification
        return qualification

    async def get_by_id(self, qualification_id: str) -> Optional[Qualification]:
        return self.records.get(qualification_id)


class RecordingAuditLog:
    """Audit log that keeps entries in memory; can fail for given entity ids."""

    def __init__(self):
        self.entries: list[AuditEntry] = []
        self.failing_ids: set[str] = set()

    async def record_deletion(
        self,
        actor_id: str,
        actor_email: str,
        actor_name: str,
        entity_id: str,
        snapshot: dict[str, Any],
    ) -> AuditEntry:
        if entity_id in self.failing_ids:
            raise ConnectionError("Audit store unavailable")
        entry = AuditEntry(
            audit_id=str(uuid.uuid4()),
            action=AuditAction.DELETE,
            resource=AuditResource.QUALIFICATION,
            actor_id=actor_id,
            actor_email=actor_email,
            actor_name=actor_name,
            timestamp=local_datetime(2024, 6, 15),
            entity_id=entity_id,
            snapshot=snapshot,
        )
        self.entries.append(entry)
        return entry

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
            timestamp=local_datetime(2024, 6, 15),
            details=details,
            metadata={"row_count": row_count, **(metadata or {})},
        )
        self.entries.append(entry)
        return entry

    async def list_by_entity(self, entity_id: str) -> list[AuditEntry]:
        return [e for e in self.entries if e.entity_id == entity_id]

    def deleted_ids(self) -> list[str]:
        return [e.entity_id for e in self.entries if e.action == AuditAction.DELETE]


@pytest.fixture
def data_source() -> InMemoryQualificationSource:
    """Empty in-memory data source."""
    return InMemoryQualificationSource()


@pytest.fixture
def audit_log() -> RecordingAuditLog:
    return RecordingAuditLog()


@pytest.fixture
def actor() -> Actor:
    return Actor(actor_id=OWNER_ID, email="broker@example.cl", first_name="Ana", last_name="Rojas")


# =============================================================================
# CORE FIXTURES
# =============================================================================


@pytest.fixture
def store(clock) -> CacheStore:
    """CacheStore driven by the manual clock, 5 minute TTL."""
    return CacheStore(clock=clock, default_ttl_seconds=300).init()


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def selection() -> SelectionModel:
    return SelectionModel()


@pytest.fixture
def coordinator_factory(data_source, audit_log, store, bus, selection, actor):
    """Build a coordinator whose lookup reads the given records."""

    def _create(
        records: Iterable[Qualification],
        cache_key: str = f"qualifications-{OWNER_ID}",
        related_keys: Iterable[str] = (),
    ):
        by_id = {q.qualification_id: q for q in records}
        return BulkMutationCoordinator(
            data_source=data_source,
            audit_log=audit_log,
            store=store,
            cache_key=cache_key,
            bus=bus,
            selection=selection,
            lookup=by_id.get,
            actor=actor,
            related_keys=related_keys,
        )

    return _create


@pytest.fixture
def session_factory(data_source, audit_log, store, bus, actor):
    """Build a QualificationsSession over the fakes; closed after the test."""
    sessions: list[QualificationsSession] = []

    def _create(
        records: Iterable[Qualification] = (),
        page_size: int = 10,
        owner_id: str = OWNER_ID,
        **kwargs,
    ):
        for q in records:
            data_source.records[q.qualification_id] = q
        session = QualificationsSession(
            owner_id=owner_id,
            data_source=data_source,
            audit_log=audit_log,
            store=store,
            bus=bus,
            actor=actor,
            page_size=page_size,
            **kwargs,
        )
        sessions.append(session)
        return session

    yield _create

    for session in sessions:
        session.close()


# =============================================================================
# API FIXTURES
# =============================================================================


@pytest.fixture
def api_context(data_source, audit_log) -> AppContext:
    """AppContext over the in-memory fakes (no database)."""
    reset_settings()
    return AppContext(
        settings=Settings(page_size=10),
        data_source=data_source,
        audit_log=audit_log,
    )


@pytest.fixture
def client(api_context) -> TestClient:
    """TestClient whose lifespan initializes the fake-backed context."""
    from qualdesk.main import app

    set_app_context(api_context)
    with TestClient(app) as test_client:
        yield test_client
    set_app_context(None)
    reset_settings()
