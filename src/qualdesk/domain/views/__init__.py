"""View models for service outputs."""

from qualdesk.domain.views.query import FilterState, SortState, PageState, QueryView
from qualdesk.domain.views.results import DeletionResult, QualificationStats

__all__ = [
    "FilterState",
    "SortState",
    "PageState",
    "QueryView",
    "DeletionResult",
    "QualificationStats",
]
