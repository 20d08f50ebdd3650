from typing import List, Optional
from datetime import datetime, timezone

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from app.models.base import to_object_id
from app.models.expense import Expense


class ExpenseRepository:
    """Expense database operations. Deleted expenses are soft-deleted."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["expenses"]

    async def insert_expense(self, expense: Expense) -> Expense:
        await self.collection.insert_one(expense.to_document())
        return expense

    async def get_expense(self, expense_id, hostel_id) -> Optional[Expense]:
        """Get a non-deleted expense within a hostel."""
        expense_oid = to_object_id(expense_id)
        hostel_oid = to_object_id(hostel_id)
        if expense_oid is None or hostel_oid is None:
            return None

        doc = await self.collection.find_one({
            "_id": expense_oid,
            "hostel_id": hostel_oid,
            "is_deleted": False
        })
        if doc:
            return Expense(**doc)
        return None

    async def update_expense(self, expense_id, update_data: dict, expected_date: datetime) -> Optional[Expense]:
        """Apply ``update_data`` only while the row is still dated ``expected_date``."""
        update_data["updated_at"] = datetime.now(timezone.utc)
        result = await self.collection.find_one_and_update(
            {"_id": to_object_id(expense_id), "date": expected_date, "is_deleted": False},
            {"$set": update_data},
            return_document=ReturnDocument.AFTER
        )
        if result:
            return Expense(**result)
        return None

    async def soft_delete_expense(self, expense_id, expected_date: datetime) -> bool:
        result = await self.collection.update_one(
            {"_id": to_object_id(expense_id), "date": expected_date, "is_deleted": False},
            {"$set": {
                "is_deleted": True,
                "updated_at": datetime.now(timezone.utc)
            }}
        )
        return result.modified_count > 0

    def _range_match(self, hostel_id, start: datetime, end: datetime) -> dict:
        return {
            "hostel_id": to_object_id(hostel_id),
            "date": {"$gte": start, "$lte": end},
            "is_deleted": False
        }

    async def sum_expenses(self, hostel_id, start: datetime, end: datetime) -> float:
        """Sum of non-deleted expense amounts in [start, end]. No rows -> 0."""
        result = await self.collection.aggregate([
            {"$match": self._range_match(hostel_id, start, end)},
            {"$group": {"_id": None, "total": {"$sum": "$amount"}}}
        ]).to_list(None)

        return result[0]["total"] if result else 0

    async def totals_by_category(self, hostel_id, start: datetime, end: datetime) -> List[dict]:
        """[{_id: category, total, count}], largest total first."""
        return await self.collection.aggregate([
            {"$match": self._range_match(hostel_id, start, end)},
            {
                "$group": {
                    "_id": "$category",
                    "total": {"$sum": "$amount"},
                    "count": {"$sum": 1}
                }
            },
            {"$sort": {"total": -1}}
        ]).to_list(None)

    async def totals_by_day(self, hostel_id, start: datetime, end: datetime) -> List[dict]:
        """[{_id: day, total, count}] in date order. Stored dates are day-aligned."""
        return await self.collection.aggregate([
            {"$match": self._range_match(hostel_id, start, end)},
            {
                "$group": {
                    "_id": "$date",
                    "total": {"$sum": "$amount"},
                    "count": {"$sum": 1}
                }
            },
            {"$sort": {"_id": 1}}
        ]).to_list(None)
