from fastapi import APIRouter, Depends

from app.api.v1.deps import get_period
from app.core.auth import require_roles
from app.db.session import get_db
from app.schemas.auth import CurrentUser
from app.schemas.calculation import BoarderStatement, DueListResponse, MealRateResult
from app.schemas.closing import MonthPeriod
from app.services.calculation_service import CalculationService
from app.services.report_service import ReportService

router = APIRouter()


@router.get("/meal-rate", response_model=MealRateResult)
async def get_meal_rate(
    period: MonthPeriod = Depends(get_period),
    current_user: CurrentUser = Depends(require_roles("admin", "manager")),
    db = Depends(get_db)
):
    """Current blended meal rate for the month."""
    service = CalculationService(db)
    return await service.calculate_meal_rate(current_user.hostel_id, period.month, period.year)


@router.get("/boarder-bill/{boarder_id}", response_model=BoarderStatement)
async def get_boarder_bill(
    boarder_id: str,
    period: MonthPeriod = Depends(get_period),
    current_user: CurrentUser = Depends(require_roles("admin", "manager", "boarder")),
    db = Depends(get_db)
):
    await ReportService(db).ensure_can_view(current_user, boarder_id)
    service = CalculationService(db)
    return await service.calculate_boarder_bill(boarder_id, current_user.hostel_id, period.month, period.year)


@router.get("/due-list", response_model=DueListResponse)
async def get_due_list(
    period: MonthPeriod = Depends(get_period),
    current_user: CurrentUser = Depends(require_roles("admin")),
    db = Depends(get_db)
):
    """All boarders' statements, highest due first."""
    service = CalculationService(db)
    return await service.get_due_list(current_user.hostel_id, period.month, period.year)
