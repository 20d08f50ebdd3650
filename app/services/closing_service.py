"""
Monthly closing state machine and the write guard every fact write goes through.

States per (hostel, month, year):
    absent --lock--> locked --unlock--> unlocked --lock--> locked ...

Transitions and guarded fact writes for the same hostel-month are serialised
through the shared MonthLockRegistry.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Optional, Tuple, Union

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from app.core.exceptions import ConflictError, MonthLockedError, NotFoundError
from app.models.base import to_object_id
from app.models.boarder import BoarderScope
from app.models.monthly_closing import BoarderStatementSnapshot, MonthlyClosing
from app.repositories.closing_repo import ClosingRepository
from app.schemas.calculation import BoarderStatement, MonthlyStatementReport
from app.services.calculation_service import CalculationService
from app.utils.month_locks import MonthLockRegistry

logger = logging.getLogger(__name__)


def _to_snapshot(statement: BoarderStatement) -> BoarderStatementSnapshot:
    return BoarderStatementSnapshot(
        boarder_id=statement.boarder.id,
        boarder_name=statement.boarder.full_name,
        total_meals=statement.total_meals,
        meal_cost=statement.meal_cost,
        seat_rent=statement.seat_rent,
        total_payment=statement.total_payment,
        opening_balance=statement.opening_balance,
        due=statement.due,
        advance=statement.advance
    )


class ClosingService:
    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        month_locks: MonthLockRegistry,
        calculator: Optional[CalculationService] = None
    ):
        self.closings = ClosingRepository(db)
        self.month_locks = month_locks
        self.calculator = calculator if calculator is not None else CalculationService(db)

    async def lock_month(self, hostel_id, month: int, year: int, actor_id) -> MonthlyClosing:
        """
        Freeze the month's statements and lock it.

        A previously unlocked closing is recomputed from current facts and
        overwritten.

        Raises:
            ConflictError: already locked, or another transition won the race
        """
        context = {"hostel_id": str(hostel_id), "month": month, "year": year, "actor_id": str(actor_id)}

        async with self.month_locks.hold(hostel_id, month, year):
            existing = await self.closings.find_by_period(hostel_id, month, year)
            if existing and existing.is_locked:
                raise ConflictError("Already locked")

            report = await self.calculator.generate_monthly_statements(
                hostel_id, month, year, BoarderScope.ALL
            )
            snapshot = [_to_snapshot(s) for s in report.statements]

            if existing is None:
                closing = MonthlyClosing(
                    hostel_id=to_object_id(hostel_id),
                    month=month,
                    year=year,
                    total_meals=report.total_meals,
                    total_expense=report.total_expense,
                    meal_rate=report.meal_rate,
                    is_locked=True,
                    locked_by=to_object_id(actor_id),
                    locked_at=datetime.now(timezone.utc),
                    boarder_statements=snapshot,
                    version=1,
                    created_by=to_object_id(actor_id)
                )
                try:
                    await self.closings.insert_closing(closing)
                except DuplicateKeyError:
                    logger.warning("Concurrent first lock lost the insert race", extra=context)
                    raise ConflictError("Month was closed by a concurrent request")
            else:
                closing = await self.closings.lock_existing(
                    existing.id,
                    existing.version,
                    actor_id,
                    report.total_meals,
                    report.total_expense,
                    report.meal_rate,
                    snapshot
                )
                if closing is None:
                    logger.warning("Lock lost a concurrent transition", extra=context)
                    raise ConflictError("Month was changed by a concurrent request")

        logger.info(
            "Locked month with %d boarder statements, meal rate %.2f",
            len(snapshot), closing.meal_rate, extra=context
        )
        return closing

    async def unlock_month(self, hostel_id, month: int, year: int) -> MonthlyClosing:
        """
        Reopen a month. The stored snapshot is kept until the next lock.

        Raises:
            NotFoundError: the month was never locked
            ConflictError: another transition won the race
        """
        context = {"hostel_id": str(hostel_id), "month": month, "year": year}

        async with self.month_locks.hold(hostel_id, month, year):
            existing = await self.closings.find_by_period(hostel_id, month, year)
            if not existing:
                raise NotFoundError("Closing not found")

            closing = await self.closings.unlock(existing.id, existing.version)
            if closing is None:
                logger.warning("Unlock lost a concurrent transition", extra=context)
                raise ConflictError("Month was changed by a concurrent request")

        logger.info("Unlocked month", extra=context)
        return closing

    async def get_closing_details(
        self,
        hostel_id,
        month: int,
        year: int
    ) -> Tuple[Union[MonthlyClosing, MonthlyStatementReport], bool]:
        """Stored closing and its lock flag, or a live preview when none exists."""
        closing = await self.closings.find_by_period(hostel_id, month, year)
        if closing is None:
            preview = await self.calculator.generate_monthly_statements(
                hostel_id, month, year, BoarderScope.ALL
            )
            return preview, False
        return closing, closing.is_locked


class MonthGuard:
    """Refuses fact writes dated in a locked month."""

    def __init__(self, db: AsyncIOMotorDatabase, month_locks: MonthLockRegistry):
        self.closings = ClosingRepository(db)
        self.month_locks = month_locks

    async def ensure_open(self, hostel_id, when: datetime):
        """Raise MonthLockedError if ``when`` falls in a locked month."""
        if await self.closings.is_locked(hostel_id, when.month, when.year):
            logger.warning(
                "Refused write to locked month",
                extra={"hostel_id": str(hostel_id), "month": when.month, "year": when.year}
            )
            raise MonthLockedError(when.month, when.year)

    @asynccontextmanager
    async def writable(self, hostel_id, *dates: datetime) -> AsyncIterator[None]:
        """
        Hold every touched month's write lock, check each is open, then run
        the write inside the block.
        """
        keys = [(hostel_id, d.month, d.year) for d in dates]
        async with self.month_locks.hold_many(keys):
            for when in dates:
                await self.ensure_open(hostel_id, when)
            yield
