"""
Integration tests for the SQLAlchemy repositories on in-memory aiosqlite.

Tests cover:
- Qualification create/get/list/delete round trip
- Delete errors (not found, other owner)
- Audit log deletion and export entries
- Full session delete flow against the database
"""

from decimal import Decimal

import pytest

from qualdesk.cache import CacheStore
from qualdesk.core.exceptions import NotFoundError, PermissionDeniedError
from qualdesk.domain.models import Actor, AuditAction, AuditResource
from qualdesk.events import EventBus
from qualdesk.repositories.sqlalchemy import (
    SqlAlchemyAuditLogRepository,
    SqlAlchemyQualificationRepository,
    get_session_factory,
    init_db,
    reset_database,
)
from qualdesk.services import QualificationsSession

from tests.conftest import OWNER_ID, make_batch, make_qualification


@pytest.fixture
async def db_session_factory():
    """Session factory bound to a fresh in-memory database."""
    await init_db("sqlite+aiosqlite:///:memory:")
    yield get_session_factory()
    await reset_database()


@pytest.fixture
def qualification_repo(db_session_factory) -> SqlAlchemyQualificationRepository:
    return SqlAlchemyQualificationRepository(db_session_factory)


@pytest.fixture
def audit_repo(db_session_factory) -> SqlAlchemyAuditLogRepository:
    return SqlAlchemyAuditLogRepository(db_session_factory)


class TestQualificationRepository:
    """Tests for SqlAlchemyQualificationRepository."""

    async def test_create_and_get_round_trip(self, qualification_repo):
        """
        GIVEN a qualification with factors and an amount
        WHEN it is stored and read back
        THEN every field survives
        """
        q = make_qualification(
            "q-1",
            amount="1234.56",
            factors={"factor8": "0.125", "factor19": "0.5"},
            unregistered=True,
        )

        await qualification_repo.create(q)
        loaded = await qualification_repo.get_by_id("q-1")

        assert loaded is not None
        assert loaded.amount.value == Decimal("1234.56")
        assert loaded.amount.currency == "CLP"
        assert loaded.factors == {"factor8": Decimal("0.125"), "factor19": Decimal("0.5")}
        assert loaded.unregistered is True
        assert loaded.taxpayer_id == q.taxpayer_id

    async def test_list_by_owner_filters_owner(self, qualification_repo):
        for q in make_batch(3):
            await qualification_repo.create(q)
        await qualification_repo.create(make_qualification("other", owner_id="broker-2"))

        records = await qualification_repo.list_by_owner(OWNER_ID)

        assert len(records) == 3
        assert {q.owner_id for q in records} == {OWNER_ID}

    async def test_delete_removes_record(self, qualification_repo):
        await qualification_repo.create(make_qualification("q-1"))

        await qualification_repo.delete("q-1")

        assert await qualification_repo.get_by_id("q-1") is None

    async def test_delete_missing_raises_not_found(self, qualification_repo):
        with pytest.raises(NotFoundError):
            await qualification_repo.delete("missing")

    async def test_delete_other_owner_is_refused(self, db_session_factory):
        repo = SqlAlchemyQualificationRepository(db_session_factory, owner_id=OWNER_ID)
        await repo.create(make_qualification("foreign", owner_id="broker-2"))

        with pytest.raises(PermissionDeniedError):
            await repo.delete("foreign")

        assert await repo.get_by_id("foreign") is not None


class TestAuditLogRepository:
    """Tests for SqlAlchemyAuditLogRepository."""

    async def test_record_deletion_keeps_snapshot(self, audit_repo):
        q = make_qualification("q-1")

        entry = await audit_repo.record_deletion(
            actor_id="u1",
            actor_email="u1@example.cl",
            actor_name="Ana Rojas",
            entity_id="q-1",
            snapshot=q.to_snapshot(),
        )
        stored = await audit_repo.list_by_entity("q-1")

        assert entry.action == AuditAction.DELETE
        assert len(stored) == 1
        assert stored[0].resource == AuditResource.QUALIFICATION
        assert stored[0].snapshot["amount"] == {"value": "1000", "currency": "CLP"}
        assert stored[0].actor_name == "Ana Rojas"

    async def test_record_export(self, audit_repo):
        entry = await audit_repo.record_export(
            actor_id="u1",
            actor_email="",
            actor_name="User",
            row_count=7,
        )

        assert entry.action == AuditAction.EXPORT
        assert entry.metadata == {"row_count": 7}
        assert entry.details == "Exported 7 qualification(s)"


class TestSessionOnDatabase:
    """End-to-end delete flow over the SQLAlchemy repositories."""

    async def test_bulk_delete_with_audit(self, qualification_repo, audit_repo):
        """
        GIVEN 4 stored qualifications and a session over the database
        WHEN two are selected and deleted
        THEN they are gone from the database, audited, and the view shows 2
        """
        for q in make_batch(4):
            await qualification_repo.create(q)
        session = QualificationsSession(
            owner_id=OWNER_ID,
            data_source=qualification_repo,
            audit_log=audit_repo,
            store=CacheStore().init(),
            bus=EventBus(),
            actor=Actor(actor_id=OWNER_ID),
        )
        await session.load()
        session.toggle_selection("q-000")
        session.toggle_selection("q-002")
        session.request_bulk_delete()

        result = await session.confirm_delete()

        assert result.ok
        assert session.view().total_count == 2
        assert len(await audit_repo.list_by_entity("q-000")) == 1
        assert await qualification_repo.get_by_id("q-002") is None
        session.close()
