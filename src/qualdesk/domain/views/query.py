"""View models for the derived qualification list."""

import dataclasses
from dataclasses import dataclass, replace
from typing import Optional, Union

from qualdesk.domain.models import Qualification, SortDirection, SortField, StatusFilter

AmountBound = Union[str, int, float, None]


def _parse_status(value: object) -> Optional[StatusFilter]:
    """Unknown or empty status values leave the status filter inactive."""
    try:
        return StatusFilter(str(value).strip().lower())
    except ValueError:
        return None


@dataclass(frozen=True)
class FilterState:
    """
    Active list filters. Every field is optional; set fields are ANDed.

    Amount bounds are kept as entered; unparseable bounds are inactive, as is
    an unknown status.
    """

    text: str = ""
    market: str = ""
    period: str = ""
    status: Optional[StatusFilter] = None
    min_amount: AmountBound = None
    max_amount: AmountBound = None

    def __post_init__(self) -> None:
        if self.status is not None and not isinstance(self.status, StatusFilter):
            object.__setattr__(self, "status", _parse_status(self.status))

    def updated(self, **changes) -> "FilterState":
        return replace(self, **changes)


@dataclass(frozen=True)
class SortState:
    """Single active sort field and its direction."""

    field: SortField = SortField.LAST_MODIFIED
    direction: SortDirection = SortDirection.DESC

    def toggled(self, field: SortField) -> "SortState":
        """Same field flips direction; a new field starts ascending."""
        if field == self.field:
            flipped = SortDirection.DESC if self.direction == SortDirection.ASC else SortDirection.ASC
            return SortState(field=field, direction=flipped)
        return SortState(field=field, direction=SortDirection.ASC)


@dataclass(frozen=True)
class PageState:
    """Page size (from configuration) and the 1-based current page."""

    page_size: int = 10
    current_page: int = 1


@dataclass(frozen=True)
class QueryView:
    """One page of the filtered and sorted qualification list."""

    rows: list[Qualification] = dataclasses.field(default_factory=list)
    total_count: int = 0
    total_pages: int = 0
    current_page: int = 1
    page_size: int = 10
