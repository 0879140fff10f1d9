from fastapi import APIRouter, Depends, HTTPException, status, Query, Request, Response
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
from finboard.database import get_db
from finboard.crud import get_filter_options
from finboard.errors import AnalyticsCancelled, NoDataError, ParameterValidationError
from finboard.query_builder import applied_filters, build_query
from finboard.schemas import (
    AnalyticsResponse,
    AppliedFilters,
    ExportRequest,
    FilterOptions,
    TransactionOut,
    TransactionPage,
)
from finboard.security import get_current_user
from finboard.services.analytics_service import analytics_service
from finboard.services.export_service import export_service, validate_columns
from finboard.services.pagination import paginate
from finboard.validation import parse_analytics_params, parse_export_params, parse_listing_params
import logging

router = APIRouter()
logger = logging.getLogger(__name__)

# Status used when the client disconnects before a response is produced
CLIENT_CLOSED_REQUEST = 499

def _bad_request(error: ParameterValidationError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error.to_dict())

@router.get("/api/transactions", response_model=TransactionPage)
async def list_transactions(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    sortBy: Optional[str] = Query(None),
    order: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    user_id: Optional[str] = Query(None),
    minAmount: Optional[str] = Query(None),
    maxAmount: Optional[str] = Query(None),
    startDate: Optional[str] = Query(None),
    endDate: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: str = Depends(get_current_user)
):
    """Filtered, sorted and paginated transaction listing"""
    raw_params = {
        "page": page,
        "limit": limit,
        "sortBy": sortBy,
        "order": order,
        "category": category,
        "status": status_filter,
        "user_id": user_id,
        "minAmount": minAmount,
        "maxAmount": maxAmount,
        "startDate": startDate,
        "endDate": endDate,
        "search": search,
    }
    try:
        params = parse_listing_params(raw_params)
    except ParameterValidationError as e:
        raise _bad_request(e)

    try:
        query = build_query(params.filters, params.sort)
        result = await paginate(db, query, params.pagination)

        return TransactionPage(
            data=[TransactionOut.model_validate(row) for row in result.data],
            pagination=result.pagination,
            filters=AppliedFilters(
                applied=applied_filters(params.filters),
                search=params.filters.search,
            ),
        )
    except Exception:
        logger.exception("Get transactions error")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch transactions. Please try again later."
        )

@router.get("/api/transactions/analytics", response_model=AnalyticsResponse)
async def get_analytics(
    request: Request,
    startDate: Optional[str] = Query(None),
    endDate: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: str = Depends(get_current_user)
):
    """Dashboard analytics over an optional date range"""
    try:
        date_range = parse_analytics_params({"startDate": startDate, "endDate": endDate})
    except ParameterValidationError as e:
        raise _bad_request(e)

    try:
        return await analytics_service.get_analytics(
            db, date_range, is_cancelled=request.is_disconnected
        )
    except AnalyticsCancelled:
        return Response(status_code=CLIENT_CLOSED_REQUEST)
    except Exception:
        logger.exception("Analytics error")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch analytics data. Please try again later."
        )

@router.get("/api/transactions/filters", response_model=FilterOptions)
async def get_filters(
    db: AsyncSession = Depends(get_db),
    current_user: str = Depends(get_current_user)
):
    """Distinct values currently stored, for the dashboard filter dropdowns"""
    try:
        return FilterOptions(**await get_filter_options(db))
    except Exception:
        logger.exception("Filters error")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch filter options. Please try again later."
        )

@router.post("/api/transactions/export")
async def export_transactions(
    export_request: Optional[ExportRequest] = None,
    db: AsyncSession = Depends(get_db),
    current_user: str = Depends(get_current_user)
):
    """Download the filtered, sorted transactions as CSV"""
    if export_request is None:
        export_request = ExportRequest()

    try:
        columns = validate_columns(export_request.columns)
        filters, sort = parse_export_params(export_request.model_dump(exclude={"columns"}))
    except ParameterValidationError as e:
        raise _bad_request(e)

    try:
        export = await export_service.export(db, filters, sort, columns)
    except NoDataError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except Exception:
        logger.exception("CSV export error")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate CSV. Please try again later."
        )

    return StreamingResponse(
        export.iter_lines(),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'}
    )
