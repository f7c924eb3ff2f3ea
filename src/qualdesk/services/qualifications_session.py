"""One operator's working session over their qualifications."""

import logging
from typing import Callable, Optional

from qualdesk.cache import CacheStore, FetchSubscription
from qualdesk.core.exceptions import NotFoundError
from qualdesk.csv import CsvExporter
from qualdesk.domain.models import Actor, Qualification, SortField
from qualdesk.domain.views import DeletionResult, FilterState, QueryView, SortState
from qualdesk.events import EventBus, Signal
from qualdesk.mutation import BulkMutationCoordinator
from qualdesk.query import QueryPipeline, rows_in_view_order
from qualdesk.repositories.protocols import AuditLogRepository, QualificationRepository
from qualdesk.selection import SelectionModel
from qualdesk.services.assistant_context import AssistantContext, DEFAULT_ROW_LIMIT
from qualdesk.services.stats_service import StatsService, stats_cache_key

logger = logging.getLogger(__name__)

LOAD_ERROR_MESSAGE = "Failed to load qualifications. Please try again."


def qualifications_cache_key(owner_id: str) -> str:
    return f"qualifications-{owner_id}"


class QualificationsSession:
    """
    Wires cache, query pipeline, selection and delete coordinator for one owner.

    Records are read through the cache. When RECORDS_CHANGED is published
    (after any delete run) the selection is cleared and the records are
    reloaded, which refetches because the coordinator invalidated the key.
    Sessions of other owners, whose keys are still cached, ignore the signal.
    The selection never holds ids outside the current filtered view.
    """

    def __init__(
        self,
        owner_id: str,
        data_source: QualificationRepository,
        audit_log: AuditLogRepository,
        store: CacheStore,
        bus: EventBus,
        actor: Actor,
        page_size: int = 10,
        cache_ttl_seconds: Optional[int] = None,
        stats_ttl_seconds: Optional[int] = None,
        assistant_row_limit: int = DEFAULT_ROW_LIMIT,
        exporter: Optional[CsvExporter] = None,
    ):
        self._owner_id = owner_id
        self._audit_log = audit_log
        self._store = store
        self._actor = actor
        self._exporter = exporter or CsvExporter()
        self._error_message: Optional[str] = None

        self.assistant = AssistantContext(row_limit=assistant_row_limit)
        self.pipeline = QueryPipeline(
            page_size=page_size,
            assistant=self.assistant,
            publish_limit=assistant_row_limit,
        )
        self.selection = SelectionModel()

        self._subscription: FetchSubscription[list[Qualification]] = FetchSubscription(
            store,
            qualifications_cache_key(owner_id),
            lambda: data_source.list_by_owner(owner_id),
            ttl_seconds=cache_ttl_seconds,
        )
        self.coordinator = BulkMutationCoordinator(
            data_source=data_source,
            audit_log=audit_log,
            store=store,
            cache_key=self._subscription.key,
            bus=bus,
            selection=self.selection,
            lookup=self.pipeline.find,
            actor=actor,
            related_keys=(stats_cache_key(owner_id),),
        )
        self.stats = StatsService(
            data_source,
            store,
            bus,
            owner_id,
            assistant=self.assistant,
            ttl_seconds=stats_ttl_seconds,
        )
        self._unsubscribe: Callable[[], None] = bus.subscribe(
            Signal.RECORDS_CHANGED, self._on_records_changed
        )

    @property
    def owner_id(self) -> str:
        return self._owner_id

    @property
    def actor(self) -> Actor:
        return self._actor

    @property
    def cache_key(self) -> str:
        return self._subscription.key

    @property
    def subscription(self) -> FetchSubscription[list[Qualification]]:
        return self._subscription

    @property
    def loading(self) -> bool:
        return self._subscription.loading

    @property
    def error_message(self) -> Optional[str]:
        """User-facing load error, if the last load failed."""
        return self._error_message

    # Loading

    async def load(self) -> QueryView:
        """Read records through the cache and rebuild the view."""
        records = await self._subscription.read()
        if self._subscription.error is not None:
            self._error_message = LOAD_ERROR_MESSAGE
        else:
            self._error_message = None
        if records is not None:
            self.pipeline.set_records(records)
            self.selection.prune_to(self.pipeline.processed_ids())
        return self.pipeline.view()

    async def reload(self) -> QueryView:
        """Drop the cached records and load again."""
        self._subscription.invalidate()
        return await self.load()

    def view(self) -> QueryView:
        return self.pipeline.view()

    # Filters, sort, paging

    def set_filters(self, **changes) -> QueryView:
        if self.pipeline.update_filters(**changes):
            self.selection.prune_to(self.pipeline.processed_ids())
        return self.pipeline.view()

    def replace_filters(self, filters: FilterState) -> QueryView:
        if self.pipeline.set_filters(filters):
            self.selection.prune_to(self.pipeline.processed_ids())
        return self.pipeline.view()

    def clear_filters(self) -> QueryView:
        self.pipeline.clear_filters()
        self.pipeline.go_to_page(1)
        self.selection.clear()
        return self.pipeline.view()

    def toggle_sort(self, field: SortField) -> SortState:
        return self.pipeline.toggle_sort(field)

    def go_to_page(self, page: int) -> QueryView:
        self.pipeline.go_to_page(page)
        return self.pipeline.view()

    # Selection

    def toggle_selection(self, qualification_id: str) -> bool:
        """Flip one row. Ids outside the filtered view are ignored."""
        if qualification_id not in self.pipeline.processed_ids():
            logger.debug("Ignoring selection of %s outside the view", qualification_id)
            return False
        return self.selection.toggle(qualification_id)

    def select_all(self) -> list[str]:
        """Select exactly the rows of the filtered view, across all pages."""
        self.selection.select_all(self.pipeline.processed_ids())
        return self.selection.ids

    def clear_selection(self) -> None:
        self.selection.clear()

    # Deletion

    def request_delete(self, qualification_id: str) -> Qualification:
        record = self.pipeline.find(qualification_id)
        if record is None:
            raise NotFoundError("Qualification", qualification_id)
        self.coordinator.request_delete(record)
        return record

    def request_bulk_delete(self) -> list[str]:
        self.coordinator.request_bulk_delete()
        return self.coordinator.pending_ids()

    def cancel_delete(self) -> None:
        self.coordinator.cancel()

    async def confirm_delete(self) -> DeletionResult:
        return await self.coordinator.confirm()

    # Export

    def rows_for_export(self) -> list[Qualification]:
        """Selected rows in view order, or the whole filtered view if none."""
        processed = self.pipeline.processed()
        if self.selection:
            return rows_in_view_order(processed, self.selection.ids)
        return list(processed)

    async def export_csv(self, path: str) -> int:
        """Write the export rows to path and audit it. Returns the row count."""
        rows = self.rows_for_export()
        count = self._exporter.export_csv(path, rows)
        await self._record_export(count, path)
        return count

    async def export_csv_text(self) -> str:
        rows = self.rows_for_export()
        text = self._exporter.to_text(rows)
        await self._record_export(len(rows), "download")
        return text

    async def _record_export(self, count: int, destination: str) -> None:
        await self._audit_log.record_export(
            actor_id=self._actor.actor_id,
            actor_email=self._actor.email,
            actor_name=self._actor.display_name,
            row_count=count,
            details=f"Exported {count} qualification(s) to {destination}",
            metadata={
                "owner_id": self._owner_id,
                "selected_only": bool(self.selection),
            },
        )

    # Lifecycle

    def close(self) -> None:
        self._unsubscribe()
        self._subscription.close()
        self.stats.close()

    async def _on_records_changed(self) -> None:
        if self._store.get_fresh(self.cache_key) is not None:
            return
        self.selection.clear()
        await self.load()
