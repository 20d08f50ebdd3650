"""
MealRepository - daily meal entries.

Invariant: at most one entry per (hostel, boarder, day). The unique index
created at startup backs up the service-level existence check.
"""

from typing import Dict, Optional
from datetime import datetime, timezone

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from app.models.base import to_object_id
from app.models.meal import MealEntry
from app.utils.billing import day_start


class MealRepository:
    """Repository for meal entries."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["meals"]

    async def insert_meal(self, entry: MealEntry) -> MealEntry:
        """Insert a new entry. Raises DuplicateKeyError for an existing boarder-day."""
        await self.collection.insert_one(entry.to_document())
        return entry

    async def get_meal(self, meal_id, hostel_id) -> Optional[MealEntry]:
        meal_oid = to_object_id(meal_id)
        hostel_oid = to_object_id(hostel_id)
        if meal_oid is None or hostel_oid is None:
            return None

        doc = await self.collection.find_one({"_id": meal_oid, "hostel_id": hostel_oid})
        if doc:
            return MealEntry(**doc)
        return None

    async def find_for_day(self, hostel_id, boarder_id, day: datetime) -> Optional[MealEntry]:
        """Entry for one boarder on one calendar day, if any."""
        doc = await self.collection.find_one({
            "hostel_id": to_object_id(hostel_id),
            "boarder_id": to_object_id(boarder_id),
            "date": day_start(day)
        })
        if doc:
            return MealEntry(**doc)
        return None

    async def replace_components(self, entry: MealEntry) -> Optional[MealEntry]:
        """Overwrite the meal components and derived total of an existing entry."""
        result = await self.collection.find_one_and_update(
            {"_id": entry.id},
            {
                "$set": {
                    "breakfast": entry.breakfast,
                    "lunch": entry.lunch,
                    "dinner": entry.dinner,
                    "custom_meals": [m.model_dump() for m in entry.custom_meals],
                    "is_off": entry.is_off,
                    "total_meals": entry.total_meals,
                    "added_by": entry.added_by,
                    "updated_at": datetime.now(timezone.utc)
                }
            },
            return_document=ReturnDocument.AFTER
        )
        if result:
            return MealEntry(**result)
        return None

    async def sum_total_meals(
        self,
        hostel_id,
        start: datetime,
        end: datetime,
        boarder_id=None
    ) -> float:
        """
        Sum of total_meals in [start, end] for a hostel, or one boarder in it.

        No matching rows -> 0.
        """
        match = {
            "hostel_id": to_object_id(hostel_id),
            "date": {"$gte": start, "$lte": end}
        }
        if boarder_id is not None:
            match["boarder_id"] = to_object_id(boarder_id)

        result = await self.collection.aggregate([
            {"$match": match},
            {"$group": {"_id": None, "total": {"$sum": "$total_meals"}}}
        ]).to_list(None)

        return result[0]["total"] if result else 0

    async def summarize_by_boarder(self, hostel_id, start: datetime, end: datetime) -> Dict[str, dict]:
        """
        Per-boarder meal statistics for a range.

        Returns: { boarder_id: {total_meals, total_breakfast, total_lunch,
        total_dinner, days_present} }
        """
        rows = await self.collection.aggregate([
            {
                "$match": {
                    "hostel_id": to_object_id(hostel_id),
                    "date": {"$gte": start, "$lte": end}
                }
            },
            {
                "$group": {
                    "_id": "$boarder_id",
                    "total_meals": {"$sum": "$total_meals"},
                    "total_breakfast": {"$sum": "$breakfast"},
                    "total_lunch": {"$sum": "$lunch"},
                    "total_dinner": {"$sum": "$dinner"},
                    "days_present": {"$sum": 1}
                }
            }
        ]).to_list(None)

        summary = {}
        for row in rows:
            boarder_id = str(row.pop("_id"))
            summary[boarder_id] = row
        return summary
