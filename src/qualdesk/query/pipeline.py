"""Derived view over a raw qualification collection: filter, sort, paginate."""

import logging
from typing import TYPE_CHECKING, Iterable, Optional, Sequence

from qualdesk.config.settings import ALLOWED_PAGE_SIZES
from qualdesk.core.exceptions import ValidationError
from qualdesk.domain.models import Qualification, SortField
from qualdesk.domain.views import FilterState, PageState, QueryView, SortState
from qualdesk.query.filters import filter_records
from qualdesk.query.pagination import clamp_page, page_slice, total_pages
from qualdesk.query.sorting import sort_records

if TYPE_CHECKING:
    from qualdesk.services.assistant_context import AssistantContext

logger = logging.getLogger(__name__)

DEFAULT_PUBLISH_LIMIT = 100


def derive(
    records: Iterable[Qualification],
    filters: FilterState,
    sort: SortState,
    page: PageState,
) -> QueryView:
    """Pure derivation of one page from the raw records and view state."""
    processed = sort_records(filter_records(records, filters), sort)
    count = len(processed)
    current = clamp_page(page.current_page, count, page.page_size)
    return QueryView(
        rows=page_slice(processed, current, page.page_size),
        total_count=count,
        total_pages=total_pages(count, page.page_size),
        current_page=current,
        page_size=page.page_size,
    )


class QueryPipeline:
    """
    Holds the raw records plus filter, sort and page state.

    The filtered and sorted list is memoized and recomputed only when records,
    filters or sort change. Every time it changes, its first rows are
    published to the assistant context.

    Page rules:
    - changing filters goes back to page 1
    - changing sort keeps the page
    - replacing the records clamps the page to the new page count
    """

    def __init__(
        self,
        page_size: int = 10,
        sort: Optional[SortState] = None,
        assistant: Optional["AssistantContext"] = None,
        publish_limit: int = DEFAULT_PUBLISH_LIMIT,
    ):
        self._records: list[Qualification] = []
        self._filters = FilterState()
        self._sort = sort or SortState()
        self._page = PageState(page_size=page_size)
        self._assistant = assistant
        self._publish_limit = publish_limit
        self._processed: Optional[list[Qualification]] = None
        self._last_published: Optional[list[Qualification]] = None

    @property
    def records(self) -> tuple[Qualification, ...]:
        return tuple(self._records)

    @property
    def filters(self) -> FilterState:
        return self._filters

    @property
    def sort(self) -> SortState:
        return self._sort

    @property
    def page(self) -> PageState:
        return self._page

    def find(self, qualification_id: str) -> Optional[Qualification]:
        """Look a record up in the raw collection."""
        for record in self._records:
            if record.qualification_id == qualification_id:
                return record
        return None

    # Inputs

    def set_records(self, records: Iterable[Qualification]) -> None:
        self._records = list(records)
        self._processed = None
        self._clamp_page()
        self._publish()

    def set_filters(self, filters: FilterState) -> bool:
        """Replace the filters. Returns True if they changed (page reset to 1)."""
        if filters == self._filters:
            return False
        self._filters = filters
        self._processed = None
        self._page = PageState(page_size=self._page.page_size, current_page=1)
        self._publish()
        return True

    def update_filters(self, **changes) -> bool:
        return self.set_filters(self._filters.updated(**changes))

    def clear_filters(self) -> bool:
        return self.set_filters(FilterState())

    def toggle_sort(self, field: SortField) -> SortState:
        """Same field flips direction, another field sorts ascending."""
        return self.set_sort(self._sort.toggled(field))

    def set_sort(self, sort: SortState) -> SortState:
        if sort != self._sort:
            self._sort = sort
            self._processed = None
            self._publish()
        return self._sort

    def set_page_size(self, page_size: int) -> None:
        if page_size not in ALLOWED_PAGE_SIZES:
            raise ValidationError(f"Page size must be one of {ALLOWED_PAGE_SIZES}")
        self._page = PageState(page_size=page_size, current_page=1)

    def go_to_page(self, page: int) -> int:
        """Move to page, clamped to the available range. Returns the page used."""
        current = clamp_page(page, len(self.processed()), self._page.page_size)
        self._page = PageState(page_size=self._page.page_size, current_page=current)
        return current

    def next_page(self) -> int:
        return self.go_to_page(self._page.current_page + 1)

    def previous_page(self) -> int:
        return self.go_to_page(self._page.current_page - 1)

    # Outputs

    def processed(self) -> list[Qualification]:
        """The filtered and sorted records, before pagination."""
        if self._processed is None:
            self._processed = sort_records(
                filter_records(self._records, self._filters),
                self._sort,
            )
        return self._processed

    def processed_ids(self) -> list[str]:
        return [q.qualification_id for q in self.processed()]

    def view(self) -> QueryView:
        processed = self.processed()
        page_size = self._page.page_size
        current = self._page.current_page
        return QueryView(
            rows=page_slice(processed, current, page_size),
            total_count=len(processed),
            total_pages=total_pages(len(processed), page_size),
            current_page=current,
            page_size=page_size,
        )

    def available_markets(self) -> list[str]:
        return sorted({q.market for q in self._records if q.market})

    def available_periods(self) -> list[str]:
        """Distinct periods, most recent first."""
        return sorted({q.period for q in self._records if q.period}, reverse=True)

    def _clamp_page(self) -> None:
        current = clamp_page(
            self._page.current_page, len(self.processed()), self._page.page_size
        )
        if current != self._page.current_page:
            logger.debug("Clamped page %d -> %d", self._page.current_page, current)
        self._page = PageState(page_size=self._page.page_size, current_page=current)

    def _publish(self) -> None:
        processed = self.processed()
        if processed == self._last_published:
            return
        self._last_published = processed
        if self._assistant is not None:
            self._assistant.publish_rows(processed[: self._publish_limit])


def rows_in_view_order(processed: Sequence[Qualification], ids: Iterable[str]) -> list[Qualification]:
    """Records of processed whose id is in ids, in processed order."""
    wanted = set(ids)
    return [q for q in processed if q.qualification_id in wanted]
