from fastapi import APIRouter, Depends, status

from app.api.v1.deps import get_period
from app.api.v1.responses import to_meal_response
from app.core.auth import require_roles
from app.db.session import get_db, get_month_locks
from app.schemas.auth import CurrentUser
from app.schemas.closing import MonthPeriod
from app.schemas.meal import BulkMealRequest, BulkMealResponse, MealCreate, MealResponse, MealSummaryResponse, MealUpdate
from app.services.meal_service import MealService
from app.services.report_service import ReportService

router = APIRouter()


@router.get("/summary", response_model=MealSummaryResponse)
async def get_meal_summary(
    period: MonthPeriod = Depends(get_period),
    current_user: CurrentUser = Depends(require_roles("admin", "manager")),
    db = Depends(get_db)
):
    """Per boarder meal counts for the month."""
    return await ReportService(db).meal_summary(current_user.hostel_id, period.month, period.year)


@router.post("", response_model=MealResponse, status_code=status.HTTP_201_CREATED)
async def add_meal(
    meal_data: MealCreate,
    current_user: CurrentUser = Depends(require_roles("admin", "manager")),
    db = Depends(get_db),
    month_locks = Depends(get_month_locks)
):
    """Add a boarder's meals for one day."""
    service = MealService(db, month_locks)
    meal = await service.add_meal(current_user.hostel_id, meal_data, current_user.id)
    return to_meal_response(meal)


@router.post("/bulk", response_model=BulkMealResponse)
async def bulk_meal_entry(
    bulk_data: BulkMealRequest,
    current_user: CurrentUser = Depends(require_roles("admin", "manager")),
    db = Depends(get_db),
    month_locks = Depends(get_month_locks)
):
    """Create or overwrite many boarders' meals for one day."""
    service = MealService(db, month_locks)
    meals, errors = await service.bulk_upsert(current_user.hostel_id, bulk_data, current_user.id)
    return BulkMealResponse(
        data=[to_meal_response(meal) for meal in meals],
        errors=errors,
        count=len(meals)
    )


@router.put("/{meal_id}", response_model=MealResponse)
async def update_meal(
    meal_id: str,
    meal_data: MealUpdate,
    current_user: CurrentUser = Depends(require_roles("admin", "manager")),
    db = Depends(get_db),
    month_locks = Depends(get_month_locks)
):
    service = MealService(db, month_locks)
    meal = await service.update_meal(meal_id, current_user.hostel_id, meal_data, current_user)
    return to_meal_response(meal)
