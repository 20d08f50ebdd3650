from fastapi import APIRouter, Depends, status

from app.api.v1.deps import get_period
from app.api.v1.responses import to_expense_response
from app.core.auth import require_roles
from app.db.session import get_db, get_month_locks
from app.schemas.auth import CurrentUser
from app.schemas.closing import MonthPeriod
from app.schemas.expense import ExpenseCreate, ExpenseResponse, ExpenseSummaryResponse, ExpenseUpdate
from app.services.expense_service import ExpenseService
from app.services.report_service import ReportService

router = APIRouter()


@router.get("/summary", response_model=ExpenseSummaryResponse)
async def get_expense_summary(
    period: MonthPeriod = Depends(get_period),
    current_user: CurrentUser = Depends(require_roles("admin")),
    db = Depends(get_db)
):
    """Expense totals for the month by category and by day."""
    return await ReportService(db).expense_summary(current_user.hostel_id, period.month, period.year)


@router.post("", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
async def add_expense(
    expense_data: ExpenseCreate,
    current_user: CurrentUser = Depends(require_roles("admin", "manager")),
    db = Depends(get_db),
    month_locks = Depends(get_month_locks)
):
    service = ExpenseService(db, month_locks)
    expense = await service.add_expense(current_user.hostel_id, expense_data, current_user.id)
    return to_expense_response(expense)


@router.put("/{expense_id}", response_model=ExpenseResponse)
async def update_expense(
    expense_id: str,
    expense_data: ExpenseUpdate,
    current_user: CurrentUser = Depends(require_roles("admin", "manager")),
    db = Depends(get_db),
    month_locks = Depends(get_month_locks)
):
    service = ExpenseService(db, month_locks)
    expense = await service.update_expense(expense_id, current_user.hostel_id, expense_data)
    return to_expense_response(expense)


@router.delete("/{expense_id}")
async def delete_expense(
    expense_id: str,
    current_user: CurrentUser = Depends(require_roles("admin")),
    db = Depends(get_db),
    month_locks = Depends(get_month_locks)
):
    """Soft delete an expense."""
    service = ExpenseService(db, month_locks)
    deleted = await service.delete_expense(expense_id, current_user.hostel_id)
    return {"success": deleted}
