"""
ClosingRepository - monthly_closings collection.

State transitions are compare-and-swap on ``version``: the filter carries the
version the caller read, so a concurrent transition makes the update match
nothing and the caller gets None back.
"""

from typing import List, Optional
from datetime import datetime, timezone

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from app.models.base import to_object_id
from app.models.monthly_closing import MonthlyClosing, BoarderStatementSnapshot


class ClosingRepository:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["monthly_closings"]

    async def find_by_period(self, hostel_id, month: int, year: int) -> Optional[MonthlyClosing]:
        doc = await self.collection.find_one({
            "hostel_id": to_object_id(hostel_id),
            "month": month,
            "year": year
        })
        if doc:
            return MonthlyClosing(**doc)
        return None

    async def is_locked(self, hostel_id, month: int, year: int) -> bool:
        """True iff a closing exists for the month and is locked."""
        doc = await self.collection.find_one(
            {
                "hostel_id": to_object_id(hostel_id),
                "month": month,
                "year": year,
                "is_locked": True
            },
            {"_id": 1}
        )
        return doc is not None

    async def insert_closing(self, closing: MonthlyClosing) -> MonthlyClosing:
        """
        Insert the first closing of a month.

        Raises DuplicateKeyError when another request created it first.
        """
        await self.collection.insert_one(closing.to_document())
        return closing

    async def lock_existing(
        self,
        closing_id,
        expected_version: int,
        locked_by,
        total_meals: float,
        total_expense: float,
        meal_rate: float,
        boarder_statements: List[BoarderStatementSnapshot]
    ) -> Optional[MonthlyClosing]:
        """Re-lock an unlocked closing, overwriting its snapshot."""
        now = datetime.now(timezone.utc)
        result = await self.collection.find_one_and_update(
            {
                "_id": to_object_id(closing_id),
                "version": expected_version,
                "is_locked": False
            },
            {
                "$set": {
                    "is_locked": True,
                    "locked_by": to_object_id(locked_by),
                    "locked_at": now,
                    "total_meals": total_meals,
                    "total_expense": total_expense,
                    "meal_rate": meal_rate,
                    "boarder_statements": [s.model_dump() for s in boarder_statements],
                    "updated_at": now
                },
                "$inc": {"version": 1}
            },
            return_document=ReturnDocument.AFTER
        )
        if result:
            return MonthlyClosing(**result)
        return None

    async def unlock(self, closing_id, expected_version: int) -> Optional[MonthlyClosing]:
        """Clear the locked flag; the snapshot stays as it was."""
        result = await self.collection.find_one_and_update(
            {
                "_id": to_object_id(closing_id),
                "version": expected_version
            },
            {
                "$set": {
                    "is_locked": False,
                    "updated_at": datetime.now(timezone.utc)
                },
                "$inc": {"version": 1}
            },
            return_document=ReturnDocument.AFTER
        )
        if result:
            return MonthlyClosing(**result)
        return None
