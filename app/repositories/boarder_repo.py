from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.models.base import to_object_id
from app.models.boarder import Boarder, BoarderScope, BoarderStatus


class BoarderRepository:
    """Boarder lookups for billing. Profile CRUD lives outside this service."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["boarders"]

    async def create_boarder(self, boarder: Boarder) -> Boarder:
        """Insert a boarder profile."""
        await self.collection.insert_one(boarder.to_document())
        return boarder

    async def get_boarder(self, boarder_id, hostel_id) -> Optional[Boarder]:
        """
        Resolve a boarder within a hostel.

        Soft-deleted boarders still resolve so their past bills stay readable.
        """
        boarder_oid = to_object_id(boarder_id)
        hostel_oid = to_object_id(hostel_id)
        if boarder_oid is None or hostel_oid is None:
            return None

        doc = await self.collection.find_one({
            "_id": boarder_oid,
            "hostel_id": hostel_oid
        })
        if doc:
            return Boarder(**doc)
        return None

    async def get_boarder_by_user(self, user_id, hostel_id) -> Optional[Boarder]:
        """Find the boarder profile linked to a login."""
        user_oid = to_object_id(user_id)
        hostel_oid = to_object_id(hostel_id)
        if user_oid is None or hostel_oid is None:
            return None

        doc = await self.collection.find_one({
            "user_id": user_oid,
            "hostel_id": hostel_oid,
            "is_deleted": False
        })
        if doc:
            return Boarder(**doc)
        return None

    def _scope_filter(self, hostel_oid, scope: BoarderScope) -> dict:
        query = {"hostel_id": hostel_oid, "is_deleted": False}
        if BoarderScope(scope) == BoarderScope.ACTIVE:
            query["status"] = BoarderStatus.ACTIVE.value
        return query

    async def list_boarders(self, hostel_id, scope: BoarderScope = BoarderScope.ALL) -> List[Boarder]:
        """List a hostel's boarders for the given scope, by name."""
        hostel_oid = to_object_id(hostel_id)
        if hostel_oid is None:
            return []

        docs = await self.collection.find(
            self._scope_filter(hostel_oid, scope),
            sort=[("full_name", 1)]
        ).to_list(None)
        return [Boarder(**doc) for doc in docs]

    async def count_boarders(self, hostel_id, scope: BoarderScope = BoarderScope.ALL) -> int:
        hostel_oid = to_object_id(hostel_id)
        if hostel_oid is None:
            return 0
        return await self.collection.count_documents(self._scope_filter(hostel_oid, scope))
