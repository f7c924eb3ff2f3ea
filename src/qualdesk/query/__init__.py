"""Filter, sort and paginate pipeline over qualification records."""

from qualdesk.query.filters import filter_records, parse_amount_bound, is_active
from qualdesk.query.sorting import sort_records
from qualdesk.query.pagination import total_pages, clamp_page, page_slice
from qualdesk.query.pipeline import QueryPipeline, derive, rows_in_view_order

__all__ = [
    "filter_records",
    "parse_amount_bound",
    "is_active",
    "sort_records",
    "total_pages",
    "clamp_page",
    "page_slice",
    "QueryPipeline",
    "derive",
    "rows_in_view_order",
]
