"""Pydantic schemas for qualification endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from qualdesk.domain.models import MutationPhase, Qualification, SortDirection, SortField, StatusFilter
from qualdesk.domain.views import DeletionResult, QualificationStats


class AmountResponse(BaseModel):
    value: Decimal
    currency: str


class QualificationResponse(BaseModel):
    """Response schema for a single qualification."""

    qualification_id: str
    owner_id: str
    instrument_type: str
    market: str
    period: str
    amount: AmountResponse
    unregistered: bool
    factors: dict[str, Decimal]
    factor_sum: Decimal
    taxpayer_id: Optional[str] = None
    contributor_id: Optional[str] = None
    qualification_type: Optional[str] = None
    created_at: Optional[datetime] = None
    last_modified_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, q: Qualification) -> "QualificationResponse":
        return cls(
            qualification_id=q.qualification_id,
            owner_id=q.owner_id,
            instrument_type=q.instrument_type,
            market=q.market,
            period=q.period,
            amount=AmountResponse(value=q.amount.value, currency=q.amount.currency),
            unregistered=q.unregistered,
            factors=dict(q.factors),
            factor_sum=q.factor_sum,
            taxpayer_id=q.taxpayer_id,
            contributor_id=q.contributor_id,
            qualification_type=q.qualification_type,
            created_at=q.created_at,
            last_modified_at=q.last_modified_at,
        )


class FiltersResponse(BaseModel):
    text: str
    market: str
    period: str
    status: Optional[StatusFilter] = None
    min_amount: Optional[str] = None
    max_amount: Optional[str] = None


class SortRequest(BaseModel):
    """Request schema for toggling the sort column."""

    field: SortField = Field(..., description="Column to sort by")


class SortResponse(BaseModel):
    field: SortField
    direction: SortDirection


class QualificationPageResponse(BaseModel):
    """One page of the filtered and sorted qualifications."""

    rows: list[QualificationResponse]
    total_count: int
    total_pages: int
    current_page: int
    page_size: int
    filters: FiltersResponse
    sort: SortResponse
    selected_ids: list[str]
    available_markets: list[str]
    available_periods: list[str]
    loading: bool = False
    error_message: Optional[str] = None


class SelectionToggleRequest(BaseModel):
    qualification_id: str = Field(..., min_length=1)


class SelectionResponse(BaseModel):
    selected_ids: list[str]
    count: int


class DeleteRequest(BaseModel):
    """Delete one qualification, or the whole selection when no id is given."""

    qualification_id: Optional[str] = None


class DeleteStateResponse(BaseModel):
    phase: MutationPhase
    bulk: bool
    pending_ids: list[str]


class DeletionResultResponse(BaseModel):
    """Outcome of a confirmed delete."""

    ok: bool
    succeeded: list[str]
    failed: Optional[str] = None
    remaining: list[str]
    skipped: list[str]
    error_message: Optional[str] = None

    @classmethod
    def from_domain(cls, result: DeletionResult) -> "DeletionResultResponse":
        return cls(
            ok=result.ok,
            succeeded=list(result.succeeded),
            failed=result.failed,
            remaining=list(result.remaining),
            skipped=list(result.skipped),
            error_message=result.error_message,
        )


class StatsResponse(BaseModel):
    total_qualifications: int
    validated_factors: int
    success_rate: float
    amount_by_currency: dict[str, Decimal]
    by_market: dict[str, int]
    by_instrument: dict[str, int]

    @classmethod
    def from_domain(cls, stats: QualificationStats) -> "StatsResponse":
        return cls(
            total_qualifications=stats.total_qualifications,
            validated_factors=stats.validated_factors,
            success_rate=stats.success_rate,
            amount_by_currency=dict(stats.amount_by_currency),
            by_market=dict(stats.by_market),
            by_instrument=dict(stats.by_instrument),
        )
