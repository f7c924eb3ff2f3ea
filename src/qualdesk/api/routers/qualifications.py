"""Qualification browsing, selection, delete and export endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, Response

from qualdesk.api.deps import get_session
from qualdesk.api.schemas import (
    DeleteRequest,
    DeleteStateResponse,
    DeletionResultResponse,
    FiltersResponse,
    QualificationPageResponse,
    QualificationResponse,
    SelectionResponse,
    SelectionToggleRequest,
    SortRequest,
    SortResponse,
    StatsResponse,
)
from qualdesk.core.exceptions import MutationError
from qualdesk.csv import CsvExporter
from qualdesk.domain.views import FilterState
from qualdesk.services import QualificationsSession

router = APIRouter(prefix="/qualifications", tags=["qualifications"])


def _page_response(session: QualificationsSession) -> QualificationPageResponse:
    view = session.view()
    filters = session.pipeline.filters
    sort = session.pipeline.sort
    return QualificationPageResponse(
        rows=[QualificationResponse.from_domain(q) for q in view.rows],
        total_count=view.total_count,
        total_pages=view.total_pages,
        current_page=view.current_page,
        page_size=view.page_size,
        filters=FiltersResponse(
            text=filters.text,
            market=filters.market,
            period=filters.period,
            status=filters.status,
            min_amount=None if filters.min_amount is None else str(filters.min_amount),
            max_amount=None if filters.max_amount is None else str(filters.max_amount),
        ),
        sort=SortResponse(field=sort.field, direction=sort.direction),
        selected_ids=session.selection.ids,
        available_markets=session.pipeline.available_markets(),
        available_periods=session.pipeline.available_periods(),
        loading=session.loading,
        error_message=session.error_message,
    )


def _selection_response(session: QualificationsSession) -> SelectionResponse:
    return SelectionResponse(selected_ids=session.selection.ids, count=len(session.selection))


def _delete_state(session: QualificationsSession) -> DeleteStateResponse:
    coordinator = session.coordinator
    return DeleteStateResponse(
        phase=coordinator.phase,
        bulk=coordinator.is_bulk,
        pending_ids=coordinator.pending_ids(),
    )


@router.get("/{owner_id}", response_model=QualificationPageResponse)
async def list_qualifications(
    text: str = Query("", description="Free-text search across the visible columns"),
    market: str = Query("", description="Exact market"),
    period: str = Query("", description="Exact period"),
    status: Optional[str] = Query(None, description="official or unregistered"),
    min_amount: Optional[str] = Query(None, description="Inclusive lower amount bound"),
    max_amount: Optional[str] = Query(None, description="Inclusive upper amount bound"),
    page: Optional[int] = Query(None, ge=1, description="Page to show"),
    session: QualificationsSession = Depends(get_session),
) -> QualificationPageResponse:
    """
    Load (through the cache) and return one page of the owner's qualifications.

    Unparseable amount bounds and unknown status values are ignored rather
    than rejected.
    """
    await session.load()
    session.replace_filters(FilterState(
        text=text,
        market=market,
        period=period,
        status=status,
        min_amount=min_amount,
        max_amount=max_amount,
    ))
    if page is not None:
        session.go_to_page(page)
    return _page_response(session)


@router.post("/{owner_id}/reload", response_model=QualificationPageResponse)
async def reload_qualifications(
    session: QualificationsSession = Depends(get_session),
) -> QualificationPageResponse:
    """Drop the cached records and fetch them again."""
    await session.reload()
    return _page_response(session)


@router.post("/{owner_id}/filters/clear", response_model=QualificationPageResponse)
async def clear_filters(
    session: QualificationsSession = Depends(get_session),
) -> QualificationPageResponse:
    session.clear_filters()
    return _page_response(session)


@router.post("/{owner_id}/sort", response_model=SortResponse)
async def toggle_sort(
    data: SortRequest,
    session: QualificationsSession = Depends(get_session),
) -> SortResponse:
    """Sort by a column; repeating the column flips the direction."""
    sort = session.toggle_sort(data.field)
    return SortResponse(field=sort.field, direction=sort.direction)


@router.get("/{owner_id}/selection", response_model=SelectionResponse)
async def get_selection(session: QualificationsSession = Depends(get_session)) -> SelectionResponse:
    return _selection_response(session)


@router.post("/{owner_id}/selection/toggle", response_model=SelectionResponse)
async def toggle_selection(
    data: SelectionToggleRequest,
    session: QualificationsSession = Depends(get_session),
) -> SelectionResponse:
    session.toggle_selection(data.qualification_id)
    return _selection_response(session)


@router.post("/{owner_id}/selection/all", response_model=SelectionResponse)
async def select_all(session: QualificationsSession = Depends(get_session)) -> SelectionResponse:
    """Select every row of the filtered view, on all pages."""
    session.select_all()
    return _selection_response(session)


@router.delete("/{owner_id}/selection", response_model=SelectionResponse)
async def clear_selection(session: QualificationsSession = Depends(get_session)) -> SelectionResponse:
    session.clear_selection()
    return _selection_response(session)


@router.post("/{owner_id}/delete/request", response_model=DeleteStateResponse)
async def request_delete(
    data: DeleteRequest,
    session: QualificationsSession = Depends(get_session),
) -> DeleteStateResponse:
    """Ask for confirmation to delete one qualification or the selection."""
    if data.qualification_id:
        session.request_delete(data.qualification_id)
    else:
        session.request_bulk_delete()
    return _delete_state(session)


@router.post("/{owner_id}/delete/cancel", response_model=DeleteStateResponse)
async def cancel_delete(session: QualificationsSession = Depends(get_session)) -> DeleteStateResponse:
    session.cancel_delete()
    return _delete_state(session)


@router.post("/{owner_id}/delete/confirm", response_model=DeletionResultResponse)
async def confirm_delete(session: QualificationsSession = Depends(get_session)):
    """Run the pending delete. A partial failure answers 400 with the result attached."""
    result = await session.confirm_delete()
    body = DeletionResultResponse.from_domain(result)
    if result.ok:
        return body
    error = MutationError()
    return JSONResponse(
        status_code=400,
        content={
            "error": error.code,
            "message": error.message,
            "result": body.model_dump(mode="json"),
        },
    )


@router.get("/{owner_id}/stats", response_model=StatsResponse)
async def get_stats(session: QualificationsSession = Depends(get_session)) -> StatsResponse:
    stats = await session.stats.read()
    return StatsResponse.from_domain(stats)


@router.get("/{owner_id}/export.csv")
async def export_csv(session: QualificationsSession = Depends(get_session)) -> Response:
    """Download the selected rows, or the whole filtered view, as CSV."""
    await session.load()
    text = await session.export_csv_text()
    filename = CsvExporter.default_filename(f"qualifications_{session.owner_id}")
    return Response(
        content=text,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
