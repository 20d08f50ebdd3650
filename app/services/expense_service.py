from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.exceptions import BillingError, ConflictError, NotFoundError
from app.models.base import to_object_id
from app.models.expense import Expense
from app.repositories.expense_repo import ExpenseRepository
from app.schemas.expense import ExpenseCreate, ExpenseUpdate
from app.services.closing_service import MonthGuard
from app.utils.billing import day_start
from app.utils.month_locks import MonthLockRegistry


class ExpenseService:
    def __init__(self, db: AsyncIOMotorDatabase, month_locks: MonthLockRegistry):
        self.expenses = ExpenseRepository(db)
        self.guard = MonthGuard(db, month_locks)

    async def add_expense(self, hostel_id, data: ExpenseCreate, actor_id) -> Expense:
        day = day_start(data.date)
        expense = Expense(
            hostel_id=to_object_id(hostel_id),
            date=day,
            category=data.category,
            description=data.description,
            amount=data.amount,
            attachment=data.attachment,
            added_by=to_object_id(actor_id)
        )
        async with self.guard.writable(hostel_id, day):
            return await self.expenses.insert_expense(expense)

    async def _require_expense(self, expense_id, hostel_id) -> Expense:
        expense = await self.expenses.get_expense(expense_id, hostel_id)
        if not expense:
            raise NotFoundError("Expense not found")
        return expense

    async def _missed_write(self, expense_id, hostel_id) -> BillingError:
        # The conditional write matched nothing: deleted, or re-dated meanwhile
        if await self.expenses.get_expense(expense_id, hostel_id):
            return ConflictError("Expense was changed by a concurrent request")
        return NotFoundError("Expense not found")

    async def update_expense(self, expense_id, hostel_id, data: ExpenseUpdate) -> Expense:
        """
        Update an expense. Moving it to another month needs both months open.

        The write only applies if the expense still has the date the month
        checks were made for.
        """
        expense = await self._require_expense(expense_id, hostel_id)

        update_data = data.model_dump(exclude_unset=True, exclude_none=True)
        dates = [expense.date]
        if "date" in update_data:
            update_data["date"] = day_start(update_data["date"])
            dates.append(update_data["date"])

        async with self.guard.writable(hostel_id, *dates):
            updated = await self.expenses.update_expense(expense.id, update_data, expense.date)
            if not updated:
                raise await self._missed_write(expense.id, hostel_id)
        return updated

    async def delete_expense(self, expense_id, hostel_id) -> bool:
        """Soft delete; the amount drops out of every later meal rate."""
        expense = await self._require_expense(expense_id, hostel_id)

        async with self.guard.writable(hostel_id, expense.date):
            if not await self.expenses.soft_delete_expense(expense.id, expense.date):
                raise await self._missed_write(expense.id, hostel_id)
        return True
