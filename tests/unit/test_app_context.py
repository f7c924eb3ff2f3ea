"""
Unit tests for AppContext session management.

Tests cover:
- One session per owner, reused on later calls
- Least recently used idle sessions closed past max_sessions
- Sessions with a pending delete are never closed
- Explicit close_session
"""

import pytest

from qualdesk.app_context import AppContext
from qualdesk.config.settings import Settings, reset_settings
from qualdesk.domain.models import MutationPhase

from tests.conftest import make_qualification


@pytest.fixture
async def context_factory(data_source, audit_log):
    """Initialized AppContext over the fakes; closed after the test."""
    contexts: list[AppContext] = []

    async def _create(max_sessions: int = 64) -> AppContext:
        context = AppContext(
            settings=Settings(page_size=10, max_sessions=max_sessions),
            data_source=data_source,
            audit_log=audit_log,
        )
        await context.initialize()
        contexts.append(context)
        return context

    yield _create

    for context in contexts:
        await context.close()
    reset_settings()


class TestSessionRegistry:
    """Tests for session_for / close_session."""

    async def test_session_is_reused_per_owner(self, context_factory):
        context = await context_factory()

        first = context.session_for("broker-a")

        assert context.session_for("broker-a") is first
        assert context.session_for("broker-b") is not first

    async def test_least_recently_used_idle_session_is_closed(self, context_factory):
        """
        GIVEN max_sessions=2 with sessions for a and b, a used most recently
        WHEN a session for c is opened
        THEN b is closed and forgotten, and its bus handlers are released
        """
        context = await context_factory(max_sessions=2)
        context.session_for("broker-a")
        evicted = context.session_for("broker-b")
        context.session_for("broker-a")

        context.session_for("broker-c")

        assert [s.owner_id for s in context.sessions()] == ["broker-a", "broker-c"]
        assert evicted.subscription.closed
        assert context.bus.handler_count() == 4

    async def test_session_with_pending_delete_is_kept(self, context_factory, data_source):
        """
        GIVEN max_sessions=1 and a session waiting for delete confirmation
        WHEN another owner opens a session
        THEN both stay open until the request is cancelled
        """
        data_source.records["x"] = make_qualification("x", owner_id="broker-a")
        context = await context_factory(max_sessions=1)
        busy = context.session_for("broker-a")
        await busy.load()
        busy.request_delete("x")
        assert busy.coordinator.phase == MutationPhase.CONFIRMING

        context.session_for("broker-b")
        assert len(context.sessions()) == 2

        busy.cancel_delete()
        context.session_for("broker-c")

        assert [s.owner_id for s in context.sessions()] == ["broker-c"]

    async def test_close_session(self, context_factory):
        context = await context_factory()
        session = context.session_for("broker-a")

        assert context.close_session("broker-a") is True
        assert context.close_session("broker-a") is False
        assert session.subscription.closed
        assert context.sessions() == []
