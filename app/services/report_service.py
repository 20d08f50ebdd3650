"""
Read-side reports built on the billing calculators.

Headcounts and the meal summary cover active boarders; anything money-related
covers every non-deleted boarder so deactivated boarders who still owe show up.
"""

import asyncio
import math
from typing import List, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.exceptions import ForbiddenError, NotFoundError
from app.models.boarder import Boarder, BoarderScope
from app.models.payment import Payment
from app.repositories.boarder_repo import BoarderRepository
from app.repositories.expense_repo import ExpenseRepository
from app.repositories.meal_repo import MealRepository
from app.repositories.payment_repo import PaymentRepository
from app.schemas.auth import CurrentUser
from app.schemas.calculation import BoarderStatement, MonthlyStatementReport
from app.schemas.expense import ExpenseBucket, ExpenseSummaryResponse
from app.schemas.meal import MealSummaryResponse, MealSummaryRow
from app.schemas.report import DashboardResponse
from app.services.calculation_service import CalculationService
from app.services.ledger_service import LedgerService
from app.utils.billing import month_bounds, round2


class ReportService:
    def __init__(self, db: AsyncIOMotorDatabase, calculator: Optional[CalculationService] = None):
        self.ledger = LedgerService(db)
        self.calculator = calculator if calculator is not None else CalculationService(db, ledger=self.ledger)
        self.boarders = BoarderRepository(db)
        self.meals = MealRepository(db)
        self.expenses = ExpenseRepository(db)
        self.payments = PaymentRepository(db)

    async def dashboard(self, hostel_id, month: int, year: int) -> DashboardResponse:
        start, end = month_bounds(month, year)
        total_boarders, total_payment, report = await asyncio.gather(
            self.boarders.count_boarders(hostel_id, BoarderScope.ACTIVE),
            self.ledger.total_payments(hostel_id, start, end),
            self.calculator.generate_monthly_statements(hostel_id, month, year, BoarderScope.ALL)
        )

        total_due = sum(s.due for s in report.statements)
        total_bill = sum(s.total_bill for s in report.statements)
        collection_rate = math.floor(total_payment / total_bill * 100 + 0.5) if total_bill > 0 else 0

        return DashboardResponse(
            month=month,
            year=year,
            total_boarders=total_boarders,
            total_meals=report.total_meals,
            total_expense=report.total_expense,
            meal_rate=report.meal_rate,
            total_due=round2(total_due),
            total_payment=total_payment,
            collection_rate=collection_rate
        )

    async def own_boarder(self, current_user: CurrentUser) -> Boarder:
        """Boarder profile of a boarder-role caller."""
        boarder = None
        if current_user.boarder_id:
            boarder = await self.boarders.get_boarder(current_user.boarder_id, current_user.hostel_id)
        if boarder is None:
            boarder = await self.boarders.get_boarder_by_user(current_user.id, current_user.hostel_id)
        if boarder is None:
            raise NotFoundError("Boarder profile not found")
        return boarder

    async def ensure_can_view(self, current_user: CurrentUser, boarder_id) -> None:
        """Boarders may only read their own bill."""
        if current_user.role != "boarder":
            return
        boarder = await self.own_boarder(current_user)
        if str(boarder.id) != str(boarder_id):
            raise ForbiddenError("Boarders can only view their own statement")

    async def boarder_dashboard(
        self,
        current_user: CurrentUser,
        month: int,
        year: int
    ) -> Tuple[BoarderStatement, List[Payment]]:
        boarder = await self.own_boarder(current_user)
        statement, recent_payments = await asyncio.gather(
            self.calculator.calculate_boarder_bill(boarder.id, current_user.hostel_id, month, year),
            self.payments.list_recent_for_boarder(current_user.hostel_id, boarder.id, limit=10)
        )
        return statement, recent_payments

    async def monthly_summary(self, hostel_id, month: int, year: int) -> MonthlyStatementReport:
        return await self.calculator.generate_monthly_statements(hostel_id, month, year, BoarderScope.ALL)

    async def meal_summary(self, hostel_id, month: int, year: int) -> MealSummaryResponse:
        """Per active boarder meal counts for the month, by name."""
        start, end = month_bounds(month, year)
        boarders, stats = await asyncio.gather(
            self.boarders.list_boarders(hostel_id, BoarderScope.ACTIVE),
            self.meals.summarize_by_boarder(hostel_id, start, end)
        )

        rows = [
            MealSummaryRow(
                boarder_id=str(boarder.id),
                boarder_name=boarder.full_name,
                room_number=boarder.room_number,
                **stats.get(str(boarder.id), {})
            )
            for boarder in boarders
        ]

        return MealSummaryResponse(
            month=month,
            year=year,
            grand_total=sum(row.total_meals for row in rows),
            data=rows
        )

    async def expense_summary(self, hostel_id, month: int, year: int) -> ExpenseSummaryResponse:
        start, end = month_bounds(month, year)
        by_category, by_day = await asyncio.gather(
            self.expenses.totals_by_category(hostel_id, start, end),
            self.expenses.totals_by_day(hostel_id, start, end)
        )

        category_breakdown = [
            ExpenseBucket(key=str(row["_id"]), total=row["total"], count=row["count"])
            for row in by_category
        ]
        daily_breakdown = [
            ExpenseBucket(key=row["_id"].strftime("%Y-%m-%d"), total=row["total"], count=row["count"])
            for row in by_day
        ]

        return ExpenseSummaryResponse(
            month=month,
            year=year,
            grand_total=round2(sum(b.total for b in category_breakdown)),
            category_breakdown=category_breakdown,
            daily_breakdown=daily_breakdown
        )
