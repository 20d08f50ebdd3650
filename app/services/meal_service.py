import logging
from typing import List, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from app.core.exceptions import BillingError, BillingValidationError, ConflictError, ForbiddenError, NotFoundError
from app.models.base import to_object_id
from app.models.meal import MealEntry
from app.repositories.boarder_repo import BoarderRepository
from app.repositories.meal_repo import MealRepository
from app.schemas.auth import CurrentUser
from app.schemas.meal import BulkMealError, BulkMealRequest, MealComponents, MealCreate, MealUpdate
from app.services.closing_service import MonthGuard
from app.utils.billing import day_start, utc_today
from app.utils.month_locks import MonthLockRegistry

logger = logging.getLogger(__name__)

DUPLICATE_MEAL = "Meal entry already exists for this boarder on this date. Use update instead."


class MealService:
    """Meal entry writes. Every write is refused while its month is locked."""

    def __init__(self, db: AsyncIOMotorDatabase, month_locks: MonthLockRegistry):
        self.meals = MealRepository(db)
        self.boarders = BoarderRepository(db)
        self.guard = MonthGuard(db, month_locks)

    async def _require_boarder(self, boarder_id, hostel_id):
        if to_object_id(boarder_id) is None:
            raise BillingValidationError("Invalid boarder id")
        boarder = await self.boarders.get_boarder(boarder_id, hostel_id)
        if not boarder or boarder.is_deleted:
            raise NotFoundError("Boarder not found")
        return boarder

    def _build_entry(self, hostel_id, boarder_id, day, components: MealComponents, actor_id, **extra) -> MealEntry:
        return MealEntry(
            hostel_id=to_object_id(hostel_id),
            boarder_id=to_object_id(boarder_id),
            date=day,
            breakfast=components.breakfast,
            lunch=components.lunch,
            dinner=components.dinner,
            custom_meals=components.custom_meals,
            is_off=components.is_off,
            added_by=to_object_id(actor_id),
            **extra
        )

    async def add_meal(self, hostel_id, data: MealCreate, actor_id) -> MealEntry:
        """
        Add one boarder's meals for one day.

        Raises:
            MonthLockedError: the day's month is locked
            ConflictError: an entry for that boarder and day already exists
        """
        day = day_start(data.date)
        await self._require_boarder(data.boarder_id, hostel_id)

        async with self.guard.writable(hostel_id, day):
            if await self.meals.find_for_day(hostel_id, data.boarder_id, day):
                raise ConflictError(DUPLICATE_MEAL)

            entry = self._build_entry(hostel_id, data.boarder_id, day, data, actor_id)
            try:
                return await self.meals.insert_meal(entry)
            except DuplicateKeyError:
                raise ConflictError(DUPLICATE_MEAL)

    async def bulk_upsert(
        self,
        hostel_id,
        request: BulkMealRequest,
        actor_id
    ) -> Tuple[List[MealEntry], List[BulkMealError]]:
        """
        Create or overwrite many boarders' entries for one day.

        A locked month rejects the whole request; per-entry failures are
        collected and the rest still go through.
        """
        day = day_start(request.date)
        results: List[MealEntry] = []
        errors: List[BulkMealError] = []

        async with self.guard.writable(hostel_id, day):
            for item in request.entries:
                try:
                    await self._require_boarder(item.boarder_id, hostel_id)
                    existing = await self.meals.find_for_day(hostel_id, item.boarder_id, day)
                    if existing:
                        entry = self._build_entry(
                            hostel_id, item.boarder_id, day, item, actor_id,
                            id=existing.id, created_at=existing.created_at
                        )
                        results.append(await self.meals.replace_components(entry))
                    else:
                        entry = self._build_entry(hostel_id, item.boarder_id, day, item, actor_id)
                        results.append(await self.meals.insert_meal(entry))
                except BillingError as e:
                    errors.append(BulkMealError(boarder_id=item.boarder_id, error=e.message))

        if errors:
            logger.info(
                "Bulk meal entry finished with %d errors",
                len(errors),
                extra={"hostel_id": str(hostel_id), "month": day.month, "year": day.year}
            )
        return results, errors

    async def update_meal(
        self,
        meal_id,
        hostel_id,
        data: MealUpdate,
        current_user: CurrentUser
    ) -> Optional[MealEntry]:
        """
        Change an entry's components; the total is re-derived.

        Managers may only edit today's entries, admins any unlocked day.
        """
        meal = await self.meals.get_meal(meal_id, hostel_id)
        if not meal:
            raise NotFoundError("Meal entry not found")

        async with self.guard.writable(hostel_id, meal.date):
            if current_user.is_manager and day_start(meal.date) < utc_today():
                raise ForbiddenError("Managers can only edit same day entries")

            merged = meal.model_dump()
            merged.update(data.model_dump(exclude_unset=True, exclude_none=True))
            merged["added_by"] = to_object_id(current_user.id)

            return await self.meals.replace_components(MealEntry(**merged))
