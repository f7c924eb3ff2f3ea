"""Pydantic schemas for API request/response."""

from qualdesk.api.schemas.qualification import (
    AmountResponse,
    QualificationResponse,
    FiltersResponse,
    SortRequest,
    SortResponse,
    QualificationPageResponse,
    SelectionToggleRequest,
    SelectionResponse,
    DeleteRequest,
    DeleteStateResponse,
    DeletionResultResponse,
    StatsResponse,
)
from qualdesk.api.schemas.cache import (
    CacheInvalidateRequest,
    CacheInvalidateResponse,
    CacheStatusResponse,
)

__all__ = [
    "AmountResponse",
    "QualificationResponse",
    "FiltersResponse",
    "SortRequest",
    "SortResponse",
    "QualificationPageResponse",
    "SelectionToggleRequest",
    "SelectionResponse",
    "DeleteRequest",
    "DeleteStateResponse",
    "DeletionResultResponse",
    "StatsResponse",
    "CacheInvalidateRequest",
    "CacheInvalidateResponse",
    "CacheStatusResponse",
]
