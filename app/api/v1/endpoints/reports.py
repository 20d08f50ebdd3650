from fastapi import APIRouter, Depends

from app.api.v1.deps import get_period
from app.api.v1.responses import to_payment_response
from app.core.auth import require_roles
from app.db.session import get_db
from app.schemas.auth import CurrentUser
from app.schemas.calculation import MonthlyStatementReport
from app.schemas.closing import MonthPeriod
from app.schemas.report import BoarderDashboardResponse, DashboardResponse
from app.services.report_service import ReportService

router = APIRouter()


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    period: MonthPeriod = Depends(get_period),
    current_user: CurrentUser = Depends(require_roles("admin", "manager")),
    db = Depends(get_db)
):
    """Hostel-wide metrics for the month."""
    return await ReportService(db).dashboard(current_user.hostel_id, period.month, period.year)


@router.get("/boarder-dashboard", response_model=BoarderDashboardResponse)
async def get_boarder_dashboard(
    period: MonthPeriod = Depends(get_period),
    current_user: CurrentUser = Depends(require_roles("boarder")),
    db = Depends(get_db)
):
    """The calling boarder's bill and latest payments."""
    statement, payments = await ReportService(db).boarder_dashboard(current_user, period.month, period.year)
    return BoarderDashboardResponse(
        statement=statement,
        recent_payments=[to_payment_response(p) for p in payments]
    )


@router.get("/monthly-summary", response_model=MonthlyStatementReport)
async def get_monthly_summary(
    period: MonthPeriod = Depends(get_period),
    current_user: CurrentUser = Depends(require_roles("admin")),
    db = Depends(get_db)
):
    return await ReportService(db).monthly_summary(current_user.hostel_id, period.month, period.year)
