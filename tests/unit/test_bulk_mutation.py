"""
Unit tests for BulkMutationCoordinator.

Tests cover:
- Phase transitions and request validation
- Single and bulk deletes with one audit entry each
- Fail-fast on delete or audit failure
- Records missing from the collection are skipped
- Cache invalidation and signals after every run
"""

import pytest

from qualdesk.core.exceptions import ValidationError
from qualdesk.domain.models import MutationPhase
from qualdesk.events import Signal

from tests.conftest import OWNER_ID, make_batch

KEY = f"qualifications-{OWNER_ID}"


@pytest.fixture
def records(data_source):
    batch = make_batch(3)
    for q in batch:
        data_source.records[q.qualification_id] = q
    return batch


@pytest.fixture
def signals(bus):
    received = []
    bus.subscribe(Signal.RECORDS_CHANGED, lambda: received.append(Signal.RECORDS_CHANGED))
    bus.subscribe(Signal.STATS_CHANGED, lambda: received.append(Signal.STATS_CHANGED))
    return received


# =============================================================================
# REQUESTS
# =============================================================================


class TestRequests:
    """Tests for request/cancel phase transitions."""

    def test_request_delete_enters_confirming(self, coordinator_factory, records):
        coordinator = coordinator_factory(records)

        coordinator.request_delete(records[0])

        assert coordinator.phase == MutationPhase.CONFIRMING
        assert coordinator.target == records[0]
        assert coordinator.pending_ids() == ["q-000"]

    def test_bulk_request_with_empty_selection_fails(self, coordinator_factory, records):
        """
        GIVEN no rows selected
        WHEN a bulk delete is requested
        THEN ValidationError is raised and the phase stays IDLE
        """
        coordinator = coordinator_factory(records)

        with pytest.raises(ValidationError):
            coordinator.request_bulk_delete()

        assert coordinator.phase == MutationPhase.IDLE

    def test_bulk_request_replaces_single_target(self, coordinator_factory, records, selection):
        coordinator = coordinator_factory(records)
        selection.select_all(["q-001", "q-002"])

        coordinator.request_delete(records[0])
        coordinator.request_bulk_delete()

        assert coordinator.target is None
        assert coordinator.is_bulk
        assert coordinator.pending_ids() == ["q-001", "q-002"]

    def test_cancel_returns_to_idle_and_keeps_selection(self, coordinator_factory, records, selection):
        coordinator = coordinator_factory(records)
        selection.select_all(["q-001"])
        coordinator.request_bulk_delete()

        coordinator.cancel()

        assert coordinator.phase == MutationPhase.IDLE
        assert coordinator.pending_ids() == []
        assert selection.ids == ["q-001"]

    async def test_confirm_without_request_fails(self, coordinator_factory, records):
        coordinator = coordinator_factory(records)

        with pytest.raises(ValidationError):
            await coordinator.confirm()


# =============================================================================
# EXECUTION
# =============================================================================


class TestConfirm:
    """Tests for confirm()."""

    async def test_single_delete(self, coordinator_factory, records, data_source, audit_log, actor):
        """
        GIVEN a single-record delete request
        WHEN it is confirmed
        THEN the record is deleted and one audit entry carries actor and snapshot
        """
        coordinator = coordinator_factory(records)
        coordinator.request_delete(records[1])

        result = await coordinator.confirm()

        assert result.ok
        assert result.succeeded == ["q-001"]
        assert "q-001" not in data_source.records
        assert len(audit_log.entries) == 1
        entry = audit_log.entries[0]
        assert entry.entity_id == "q-001"
        assert entry.actor_id == actor.actor_id
        assert entry.actor_email == "broker@example.cl"
        assert entry.actor_name == "Ana Rojas"
        assert entry.snapshot["qualification_id"] == "q-001"
        assert entry.snapshot["amount"] == {"value": "200", "currency": "CLP"}

    async def test_bulk_delete_runs_in_selection_order(
        self, coordinator_factory, records, data_source, audit_log, selection
    ):
        coordinator = coordinator_factory(records)
        for qualification_id in ["q-002", "q-000", "q-001"]:
            selection.toggle(qualification_id)
        coordinator.request_bulk_delete()

        result = await coordinator.confirm()

        assert result.ok
        assert data_source.delete_calls == ["q-002", "q-000", "q-001"]
        assert audit_log.deleted_ids() == ["q-002", "q-000", "q-001"]
        assert data_source.records == {}

    async def test_fail_fast_on_delete_failure(
        self, coordinator_factory, records, data_source, audit_log, selection, caplog
    ):
        """
        GIVEN ids [q-000, q-001, q-002] where deleting q-001 raises
        WHEN the bulk delete is confirmed
        THEN q-000 is deleted and audited, q-001 and q-002 are untouched
        AND one generic error is reported
        """
        data_source.failing_ids = {"q-001"}
        coordinator = coordinator_factory(records)
        selection.select_all(["q-000", "q-001", "q-002"])
        coordinator.request_bulk_delete()

        result = await coordinator.confirm()

        assert not result.ok
        assert result.succeeded == ["q-000"]
        assert result.failed == "q-001"
        assert result.remaining == ["q-002"]
        assert result.error_message == "Failed to delete qualification(s)"
        assert set(data_source.records) == {"q-001", "q-002"}
        assert data_source.delete_calls == ["q-000", "q-001"]
        assert audit_log.deleted_ids() == ["q-000"]
        assert coordinator.last_result == result
        assert "Failed to delete qualification q-001" in caplog.text

    async def test_fail_fast_on_audit_failure(
        self, coordinator_factory, records, data_source, audit_log, selection
    ):
        """
        GIVEN an audit write that fails for the first record
        WHEN the bulk delete is confirmed
        THEN the run stops there and later records are not attempted
        """
        audit_log.failing_ids = {"q-000"}
        coordinator = coordinator_factory(records)
        selection.select_all(["q-000", "q-001"])
        coordinator.request_bulk_delete()

        result = await coordinator.confirm()

        assert result.failed == "q-000"
        assert result.remaining == ["q-001"]
        assert data_source.delete_calls == ["q-000"]
        assert audit_log.entries == []

    async def test_missing_record_is_skipped(
        self, coordinator_factory, records, data_source, selection
    ):
        coordinator = coordinator_factory(records[:2])
        selection.select_all(["q-000", "gone", "q-001"])
        coordinator.request_bulk_delete()

        result = await coordinator.confirm()

        assert result.ok
        assert result.skipped == ["gone"]
        assert result.succeeded == ["q-000", "q-001"]
        assert "gone" not in data_source.delete_calls


# =============================================================================
# AFTERMATH
# =============================================================================


class TestSettle:
    """Tests for what happens after every run."""

    @pytest.mark.parametrize("fail", [False, True])
    async def test_run_invalidates_signals_and_resets(
        self, coordinator_factory, records, data_source, store, selection, signals, fail
    ):
        """
        GIVEN a cached collection and a confirmed bulk delete
        WHEN the run completes or fails
        THEN the key is invalidated, both signals are published,
        AND selection, target and phase are reset
        """
        if fail:
            data_source.failing_ids = {"q-000"}
        store.put(KEY, list(records))
        coordinator = coordinator_factory(records)
        selection.select_all(["q-000", "q-001"])
        coordinator.request_bulk_delete()

        await coordinator.confirm()

        assert KEY not in store
        assert signals == [Signal.RECORDS_CHANGED, Signal.STATS_CHANGED]
        assert len(selection) == 0
        assert coordinator.target is None
        assert coordinator.phase == MutationPhase.IDLE

    async def test_run_invalidates_related_keys_only(
        self, coordinator_factory, records, store, selection
    ):
        store.put(KEY, list(records))
        store.put(f"stats-{OWNER_ID}", "owner stats")
        store.put("stats-broker-2", "other stats")
        coordinator = coordinator_factory(records, related_keys=(f"stats-{OWNER_ID}",))
        selection.select_all(["q-000"])
        coordinator.request_bulk_delete()

        await coordinator.confirm()

        assert f"stats-{OWNER_ID}" not in store
        assert "stats-broker-2" in store
