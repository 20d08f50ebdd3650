from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.exceptions import BillingValidationError, ConflictError, NotFoundError
from app.models.base import to_object_id
from app.models.payment import Payment
from app.repositories.boarder_repo import BoarderRepository
from app.repositories.payment_repo import PaymentRepository
from app.schemas.payment import PaymentCreate, PaymentUpdate
from app.services.closing_service import MonthGuard
from app.utils.billing import day_start
from app.utils.month_locks import MonthLockRegistry


class PaymentService:
    """Payment writes. Payments count toward the month they are dated in."""

    def __init__(self, db: AsyncIOMotorDatabase, month_locks: MonthLockRegistry):
        self.payments = PaymentRepository(db)
        self.boarders = BoarderRepository(db)
        self.guard = MonthGuard(db, month_locks)

    async def add_payment(self, hostel_id, data: PaymentCreate, actor_id) -> Payment:
        if to_object_id(data.boarder_id) is None:
            raise BillingValidationError("Invalid boarder id")
        boarder = await self.boarders.get_boarder(data.boarder_id, hostel_id)
        if not boarder or boarder.is_deleted:
            raise NotFoundError("Boarder not found")

        day = day_start(data.date)
        payment = Payment(
            hostel_id=to_object_id(hostel_id),
            boarder_id=boarder.id,
            date=day,
            amount=data.amount,
            method=data.method,
            reference=data.reference,
            notes=data.notes,
            added_by=to_object_id(actor_id)
        )
        async with self.guard.writable(hostel_id, day):
            return await self.payments.insert_payment(payment)

    async def update_payment(self, payment_id, hostel_id, data: PaymentUpdate) -> Payment:
        payment = await self.payments.get_payment(payment_id, hostel_id)
        if not payment:
            raise NotFoundError("Payment not found")

        update_data = data.model_dump(exclude_unset=True, exclude_none=True, mode="json")
        dates = [payment.date]
        if "date" in update_data:
            update_data["date"] = day_start(data.date)
            dates.append(update_data["date"])

        async with self.guard.writable(hostel_id, *dates):
            updated = await self.payments.update_payment(payment.id, update_data, payment.date)
            if not updated:
                # Re-dated by another request after it was read
                raise ConflictError("Payment was changed by a concurrent request")
        return updated
