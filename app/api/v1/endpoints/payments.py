from fastapi import APIRouter, Depends, status

from app.api.v1.responses import to_payment_response
from app.core.auth import require_roles
from app.db.session import get_db, get_month_locks
from app.schemas.auth import CurrentUser
from app.schemas.payment import PaymentCreate, PaymentResponse, PaymentUpdate
from app.services.payment_service import PaymentService

router = APIRouter()


@router.post("", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
async def add_payment(
    payment_data: PaymentCreate,
    current_user: CurrentUser = Depends(require_roles("admin")),
    db = Depends(get_db),
    month_locks = Depends(get_month_locks)
):
    """Record a payment from a boarder."""
    service = PaymentService(db, month_locks)
    payment = await service.add_payment(current_user.hostel_id, payment_data, current_user.id)
    return to_payment_response(payment)


@router.put("/{payment_id}", response_model=PaymentResponse)
async def update_payment(
    payment_id: str,
    payment_data: PaymentUpdate,
    current_user: CurrentUser = Depends(require_roles("admin")),
    db = Depends(get_db),
    month_locks = Depends(get_month_locks)
):
    service = PaymentService(db, month_locks)
    payment = await service.update_payment(payment_id, current_user.hostel_id, payment_data)
    return to_payment_response(payment)
