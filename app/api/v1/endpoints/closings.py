from fastapi import APIRouter, Depends, Path

from app.api.v1.deps import get_period
from app.api.v1.responses import to_closing_response
from app.core.auth import require_roles
from app.db.session import get_db, get_month_locks
from app.models.monthly_closing import MonthlyClosing
from app.schemas.auth import CurrentUser
from app.schemas.calculation import BoarderStatement
from app.schemas.closing import ClosingDetailsResponse, MonthlyClosingResponse, MonthPeriod
from app.services.calculation_service import CalculationService
from app.services.closing_service import ClosingService
from app.services.report_service import ReportService

router = APIRouter()


@router.post("/lock", response_model=MonthlyClosingResponse)
async def lock_month(
    period: MonthPeriod,
    current_user: CurrentUser = Depends(require_roles("admin")),
    db = Depends(get_db),
    month_locks = Depends(get_month_locks)
):
    """Snapshot every boarder's statement and lock the month against writes."""
    service = ClosingService(db, month_locks)
    closing = await service.lock_month(current_user.hostel_id, period.month, period.year, current_user.id)
    return to_closing_response(closing)


@router.post("/unlock", response_model=MonthlyClosingResponse)
async def unlock_month(
    period: MonthPeriod,
    current_user: CurrentUser = Depends(require_roles("admin")),
    db = Depends(get_db),
    month_locks = Depends(get_month_locks)
):
    """Reopen a locked month."""
    service = ClosingService(db, month_locks)
    closing = await service.unlock_month(current_user.hostel_id, period.month, period.year)
    return to_closing_response(closing)


@router.get("/statement/{boarder_id}", response_model=BoarderStatement)
async def get_boarder_statement(
    boarder_id: str,
    period: MonthPeriod = Depends(get_period),
    current_user: CurrentUser = Depends(require_roles("admin", "boarder")),
    db = Depends(get_db)
):
    await ReportService(db).ensure_can_view(current_user, boarder_id)
    service = CalculationService(db)
    return await service.calculate_boarder_bill(boarder_id, current_user.hostel_id, period.month, period.year)


@router.get("/{month}/{year}", response_model=ClosingDetailsResponse)
async def get_closing_details(
    month: int = Path(..., ge=1, le=12),
    year: int = Path(..., ge=2000, le=2100),
    current_user: CurrentUser = Depends(require_roles("admin")),
    db = Depends(get_db),
    month_locks = Depends(get_month_locks)
):
    """Stored closing for the month, or a live preview if it was never locked."""
    service = ClosingService(db, month_locks)
    data, is_locked = await service.get_closing_details(current_user.hostel_id, month, year)
    if isinstance(data, MonthlyClosing):
        data = to_closing_response(data)
    return ClosingDetailsResponse(is_locked=is_locked, data=data)
