"""Filtering of qualification records."""

from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional

from qualdesk.domain.models import Qualification, StatusFilter
from qualdesk.domain.views import FilterState
from qualdesk.domain.views.query import AmountBound


def parse_amount_bound(value: AmountBound) -> Optional[Decimal]:
    """
    Parse an amount bound as entered by the operator.

    Returns None (inactive bound) for empty, non-numeric, NaN or infinite input.
    """
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip()
    if not text:
        return None
    try:
        bound = Decimal(text)
    except InvalidOperation:
        return None
    if not bound.is_finite():
        return None
    return bound


def normalize_text(value: str) -> str:
    """Casefold and strip surrounding whitespace; inner spacing is kept."""
    return value.strip().casefold()


def _searchable_fields(record: Qualification) -> Iterable[str]:
    yield record.instrument_type
    yield record.market
    yield record.period
    if record.qualification_type:
        yield record.qualification_type
    if record.taxpayer_id:
        yield record.taxpayer_id


def matches_text(record: Qualification, term: str) -> bool:
    """Case-insensitive substring match over the record's textual fields."""
    return any(term in field.casefold() for field in _searchable_fields(record))


def is_active(filters: FilterState) -> bool:
    """Return True if at least one predicate would narrow the records."""
    return bool(
        normalize_text(filters.text)
        or filters.market
        or filters.period
        or filters.status is not None
        or parse_amount_bound(filters.min_amount) is not None
        or parse_amount_bound(filters.max_amount) is not None
    )


def filter_records(
    records: Iterable[Qualification],
    filters: FilterState,
) -> list[Qualification]:
    """
    Apply every active predicate as a conjunction, preserving input order.

    With no active predicate the output equals the input.
    """
    result = list(records)

    term = normalize_text(filters.text)
    if term:
        result = [q for q in result if matches_text(q, term)]

    if filters.market:
        result = [q for q in result if q.market == filters.market]

    if filters.period:
        result = [q for q in result if q.period == filters.period]

    if filters.status is not None:
        wanted = filters.status == StatusFilter.UNREGISTERED
        result = [q for q in result if q.unregistered is wanted]

    min_amount = parse_amount_bound(filters.min_amount)
    if min_amount is not None:
        result = [q for q in result if q.amount.value >= min_amount]

    max_amount = parse_amount_bound(filters.max_amount)
    if max_amount is not None:
        result = [q for q in result if q.amount.value <= max_amount]

    return result
