"""
CalculationService - meal rate, boarder bills and monthly statements.

All operations are pure reads over the ledger and safe to run concurrently.

Bill for one boarder in a month:
    meal_rate  = total_expense / total_meals   (0 when no meals)
    meal_cost  = round2(boarder_meals * meal_rate)
    total_bill = meal_cost + seat_rent
    net_due    = total_bill - payments - opening_balance
    due / advance = positive / negative part of net_due
"""

import asyncio
from datetime import datetime
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.exceptions import NotFoundError
from app.models.boarder import Boarder, BoarderScope
from app.repositories.boarder_repo import BoarderRepository
from app.schemas.calculation import (
    BoarderRef,
    BoarderStatement,
    DueListResponse,
    MealRateResult,
    MonthlyStatementReport,
)
from app.services.ledger_service import LedgerService
from app.utils.billing import month_bounds, round2, split_net_due


class CalculationService:
    def __init__(
        self,
        db: Optional[AsyncIOMotorDatabase],
        ledger: Optional[LedgerService] = None,
        boarders: Optional[BoarderRepository] = None
    ):
        self.ledger = ledger if ledger is not None else LedgerService(db)
        self.boarders = boarders if boarders is not None else BoarderRepository(db)

    async def calculate_meal_rate(self, hostel_id, month: int, year: int) -> MealRateResult:
        """Blended meal rate for a hostel-month."""
        start, end = month_bounds(month, year)
        total_expense, total_meals = await asyncio.gather(
            self.ledger.total_expense(hostel_id, start, end),
            self.ledger.total_meals(hostel_id, start, end)
        )

        meal_rate = round2(total_expense / total_meals) if total_meals > 0 else 0.0

        return MealRateResult(
            total_expense=total_expense,
            total_meals=total_meals,
            meal_rate=meal_rate
        )

    async def _build_statement(
        self,
        boarder: Boarder,
        hostel_id,
        month: int,
        year: int,
        meal_rate: float,
        start: datetime,
        end: datetime
    ) -> BoarderStatement:
        boarder_meals, total_payment = await asyncio.gather(
            self.ledger.total_meals(hostel_id, start, end, boarder_id=boarder.id),
            self.ledger.total_payments(hostel_id, start, end, boarder_id=boarder.id)
        )

        meal_cost = round2(boarder_meals * meal_rate)
        total_bill = meal_cost + boarder.seat_rent
        net_due = total_bill - total_payment - boarder.opening_balance
        due, advance = split_net_due(net_due)

        return BoarderStatement(
            boarder=BoarderRef(
                id=str(boarder.id),
                full_name=boarder.full_name,
                room_number=boarder.room_number
            ),
            month=month,
            year=year,
            meal_rate=meal_rate,
            total_meals=boarder_meals,
            meal_cost=meal_cost,
            seat_rent=boarder.seat_rent,
            opening_balance=boarder.opening_balance,
            total_bill=total_bill,
            total_payment=total_payment,
            due=due,
            advance=advance
        )

    async def calculate_boarder_bill(self, boarder_id, hostel_id, month: int, year: int) -> BoarderStatement:
        """
        One boarder's bill for a month.

        Raises:
            NotFoundError: boarder does not exist in this hostel
        """
        boarder = await self.boarders.get_boarder(boarder_id, hostel_id)
        if not boarder:
            raise NotFoundError("Boarder not found")

        start, end = month_bounds(month, year)
        rate = await self.calculate_meal_rate(hostel_id, month, year)
        return await self._build_statement(boarder, hostel_id, month, year, rate.meal_rate, start, end)

    async def generate_monthly_statements(
        self,
        hostel_id,
        month: int,
        year: int,
        scope: BoarderScope = BoarderScope.ALL
    ) -> MonthlyStatementReport:
        """Statements for every boarder in scope plus hostel totals."""
        start, end = month_bounds(month, year)
        rate, boarders = await asyncio.gather(
            self.calculate_meal_rate(hostel_id, month, year),
            self.boarders.list_boarders(hostel_id, scope)
        )

        statements = await asyncio.gather(*[
            self._build_statement(boarder, hostel_id, month, year, rate.meal_rate, start, end)
            for boarder in boarders
        ])

        return MonthlyStatementReport(
            hostel_id=str(hostel_id),
            month=month,
            year=year,
            meal_rate=rate.meal_rate,
            total_expense=rate.total_expense,
            total_meals=rate.total_meals,
            total_boarders=len(boarders),
            statements=list(statements)
        )

    async def get_due_list(self, hostel_id, month: int, year: int) -> DueListResponse:
        """Statements ordered by due, highest first."""
        report = await self.generate_monthly_statements(hostel_id, month, year, BoarderScope.ALL)
        # sorted() is stable: equal dues keep name order
        statements = sorted(report.statements, key=lambda s: s.due, reverse=True)

        return DueListResponse(
            month=month,
            year=year,
            meal_rate=report.meal_rate,
            total_due=round2(sum(s.due for s in statements)),
            statements=statements
        )
