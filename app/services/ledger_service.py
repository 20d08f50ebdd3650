from datetime import datetime

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.repositories.meal_repo import MealRepository
from app.repositories.expense_repo import ExpenseRepository
from app.repositories.payment_repo import PaymentRepository


class LedgerService:
    """
    Read-only sums over the three billing facts.

    Every accessor takes a hostel and an inclusive [start, end] range and
    returns 0 when nothing matches.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        self.meals = MealRepository(db)
        self.expenses = ExpenseRepository(db)
        self.payments = PaymentRepository(db)

    async def total_meals(self, hostel_id, start: datetime, end: datetime, boarder_id=None) -> float:
        return float(await self.meals.sum_total_meals(hostel_id, start, end, boarder_id=boarder_id))

    async def total_expense(self, hostel_id, start: datetime, end: datetime) -> float:
        """Non-deleted expenses only."""
        return float(await self.expenses.sum_expenses(hostel_id, start, end))

    async def total_payments(self, hostel_id, start: datetime, end: datetime, boarder_id=None) -> float:
        return float(await self.payments.sum_payments(hostel_id, start, end, boarder_id=boarder_id))
