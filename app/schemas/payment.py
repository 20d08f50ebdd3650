from typing import Optional
import datetime as dt
from pydantic import BaseModel, Field

from app.models.payment import PaymentMethod


class PaymentCreate(BaseModel):
    boarder_id: str
    date: dt.date
    amount: float = Field(..., ge=0)
    method: PaymentMethod = PaymentMethod.CASH
    reference: Optional[str] = None
    notes: Optional[str] = None


class PaymentUpdate(BaseModel):
    date: Optional[dt.date] = None
    amount: Optional[float] = Field(default=None, ge=0)
    method: Optional[PaymentMethod] = None
    reference: Optional[str] = None
    notes: Optional[str] = None


class PaymentResponse(BaseModel):
    id: str
    hostel_id: str
    boarder_id: str
    date: dt.datetime
    amount: float
    method: str
    reference: Optional[str] = None
    notes: Optional[str] = None
    updated_at: dt.datetime
