from typing import List, Optional
from datetime import datetime, timezone

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from app.models.base import to_object_id
from app.models.payment import Payment


class PaymentRepository:
    """Payment database operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["payments"]

    async def insert_payment(self, payment: Payment) -> Payment:
        await self.collection.insert_one(payment.to_document())
        return payment

    async def get_payment(self, payment_id, hostel_id) -> Optional[Payment]:
        payment_oid = to_object_id(payment_id)
        hostel_oid = to_object_id(hostel_id)
        if payment_oid is None or hostel_oid is None:
            return None

        doc = await self.collection.find_one({"_id": payment_oid, "hostel_id": hostel_oid})
        if doc:
            return Payment(**doc)
        return None

    async def update_payment(self, payment_id, update_data: dict, expected_date: datetime) -> Optional[Payment]:
        update_data["updated_at"] = datetime.now(timezone.utc)
        result = await self.collection.find_one_and_update(
            {"_id": to_object_id(payment_id), "date": expected_date},
            {"$set": update_data},
            return_document=ReturnDocument.AFTER
        )
        if result:
            return Payment(**result)
        return None

    async def sum_payments(
        self,
        hostel_id,
        start: datetime,
        end: datetime,
        boarder_id=None
    ) -> float:
        """
        Sum of payment amounts in [start, end] for a hostel, or one boarder in it.

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
            {"$group": {"_id": None, "total": {"$sum": "$amount"}}}
        ]).to_list(None)

        return result[0]["total"] if result else 0

    async def list_recent_for_boarder(self, hostel_id, boarder_id, limit: int = 10) -> List[Payment]:
        """Latest payments of a boarder, newest first."""
        docs = await self.collection.find(
            {
                "hostel_id": to_object_id(hostel_id),
                "boarder_id": to_object_id(boarder_id)
            },
            sort=[("date", -1)],
            limit=limit
        ).to_list(None)
        return [Payment(**doc) for doc in docs]
