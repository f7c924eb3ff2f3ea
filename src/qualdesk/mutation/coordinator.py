"""Delete-and-audit runs over one record or the current selection."""

import logging
from typing import Callable, Iterable, Optional

from qualdesk.cache import CacheStore
from qualdesk.core.exceptions import MutationError, ValidationError
from qualdesk.domain.models import Actor, MutationPhase, Qualification
from qualdesk.domain.views import DeletionResult
from qualdesk.events import EventBus, Signal
from qualdesk.repositories.protocols import AuditLogRepository, QualificationRepository
from qualdesk.selection import SelectionModel

logger = logging.getLogger(__name__)

RecordLookup = Callable[[str], Optional[Qualification]]


class BulkMutationCoordinator:
    """
    Runs deletes one record at a time, each followed by its audit entry.

    Phases: IDLE -> CONFIRMING -> EXECUTING -> COMPLETED | FAILED -> IDLE.

    The first failing delete or audit write stops the run; earlier records
    stay deleted and audited, later ones are not attempted. Whatever the
    outcome, the owning cache key and any related keys (the owner's stats)
    are invalidated, RECORDS_CHANGED and STATS_CHANGED are published, and
    the target and selection are cleared.
    """

    def __init__(
        self,
        data_source: QualificationRepository,
        audit_log: AuditLogRepository,
        store: CacheStore,
        cache_key: str,
        bus: EventBus,
        selection: SelectionModel,
        lookup: RecordLookup,
        actor: Actor,
        related_keys: Iterable[str] = (),
    ):
        self._data_source = data_source
        self._audit_log = audit_log
        self._store = store
        self._cache_key = cache_key
        self._bus = bus
        self._selection = selection
        self._lookup = lookup
        self._actor = actor
        self._related_keys = tuple(related_keys)

        self._phase = MutationPhase.IDLE
        self._target: Optional[Qualification] = None
        self._bulk = False
        self._last_result: Optional[DeletionResult] = None

    @property
    def phase(self) -> MutationPhase:
        return self._phase

    @property
    def target(self) -> Optional[Qualification]:
        return self._target

    @property
    def is_bulk(self) -> bool:
        return self._bulk

    @property
    def cache_key(self) -> str:
        return self._cache_key

    @property
    def last_result(self) -> Optional[DeletionResult]:
        return self._last_result

    def pending_ids(self) -> list[str]:
        """Ids a confirm() would delete right now, in order."""
        if self._phase != MutationPhase.CONFIRMING:
            return []
        if self._bulk:
            return self._selection.ids
        return [self._target.qualification_id] if self._target else []

    def request_delete(self, record: Qualification) -> None:
        """Ask to delete a single record."""
        self._ensure_not_executing()
        self._target = record
        self._bulk = False
        self._phase = MutationPhase.CONFIRMING

    def request_bulk_delete(self) -> None:
        """Ask to delete every selected record."""
        self._ensure_not_executing()
        if not self._selection:
            raise ValidationError("No qualifications selected")
        self._target = None
        self._bulk = True
        self._phase = MutationPhase.CONFIRMING

    def cancel(self) -> None:
        """Drop the pending request; the selection is kept."""
        self._ensure_not_executing()
        self._target = None
        self._bulk = False
        self._phase = MutationPhase.IDLE

    async def confirm(self) -> DeletionResult:
        """
        Execute the pending request.

        Returns:
            DeletionResult; on failure error_message carries the generic
            message and the root cause is only logged.

        Raises:
            ValidationError: If no request is waiting for confirmation
        """
        if self._phase != MutationPhase.CONFIRMING:
            raise ValidationError("No delete request to confirm")

        ids = self.pending_ids()
        self._phase = MutationPhase.EXECUTING
        logger.info(
            "Deleting %d qualification(s) for %s (%s)",
            len(ids),
            self._actor.actor_id,
            "bulk" if self._bulk else "single",
        )

        succeeded: list[str] = []
        skipped: list[str] = []
        result: DeletionResult
        try:
            for index, qualification_id in enumerate(ids):
                record = self._lookup(qualification_id)
                if record is None:
                    logger.debug("Skipping %s: no longer in the collection", qualification_id)
                    skipped.append(qualification_id)
                    continue
                try:
                    await self._delete_one(record)
                except Exception:
                    logger.exception("Failed to delete qualification %s", qualification_id)
                    result = DeletionResult(
                        succeeded=succeeded,
                        failed=qualification_id,
                        remaining=ids[index + 1:],
                        skipped=skipped,
                        error_message=MutationError().message,
                    )
                    self._phase = MutationPhase.FAILED
                    break
                succeeded.append(qualification_id)
            else:
                result = DeletionResult(succeeded=succeeded, skipped=skipped)
                self._phase = MutationPhase.COMPLETED
        finally:
            await self._settle()

        self._last_result = result
        return result

    async def _delete_one(self, record: Qualification) -> None:
        await self._data_source.delete(record.qualification_id)
        await self._audit_log.record_deletion(
            actor_id=self._actor.actor_id,
            actor_email=self._actor.email,
            actor_name=self._actor.display_name,
            entity_id=record.qualification_id,
            snapshot=record.to_snapshot(),
        )

    async def _settle(self) -> None:
        logger.debug("Delete run finished in phase %s", self._phase.value)
        self._store.invalidate(self._cache_key)
        for key in self._related_keys:
            self._store.invalidate(key)
        self._target = None
        self._bulk = False
        self._selection.clear()
        self._phase = MutationPhase.IDLE
        await self._bus.publish(Signal.RECORDS_CHANGED)
        await self._bus.publish(Signal.STATS_CHANGED)

    def _ensure_not_executing(self) -> None:
        if self._phase == MutationPhase.EXECUTING:
            raise ValidationError("A delete is already running")
