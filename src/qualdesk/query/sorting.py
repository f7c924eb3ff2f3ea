"""Sorting of qualification records."""

from typing import Any, Callable, Iterable

from qualdesk.domain.models import Qualification, SortDirection, SortField
from qualdesk.domain.views import SortState

_FIELD_GETTERS: dict[SortField, Callable[[Qualification], Any]] = {
    SortField.TAXPAYER_ID: lambda q: q.taxpayer_id,
    SortField.INSTRUMENT_TYPE: lambda q: q.instrument_type,
    SortField.MARKET: lambda q: q.market,
    SortField.PERIOD: lambda q: q.period,
    SortField.QUALIFICATION_TYPE: lambda q: q.qualification_type,
    # Monetary amounts compare by numeric value only
    SortField.AMOUNT: lambda q: q.amount.value,
    SortField.UNREGISTERED: lambda q: q.unregistered,
    SortField.LAST_MODIFIED: lambda q: q.last_modified_at,
}


def sort_key(field: SortField) -> Callable[[Qualification], tuple]:
    """
    Build a key for field. Missing values order before present ones.
    """
    getter = _FIELD_GETTERS[field]

    def key(record: Qualification) -> tuple:
        value = getter(record)
        if value is None:
            return (0,)
        return (1, value)

    return key


def sort_records(
    records: Iterable[Qualification],
    sort: SortState,
) -> list[Qualification]:
    """
    Sort by the active field and direction.

    There is no secondary key; ties keep their incoming relative order.
    """
    return sorted(
        records,
        key=sort_key(sort.field),
        reverse=sort.direction == SortDirection.DESC,
    )
