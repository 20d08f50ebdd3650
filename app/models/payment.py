from typing import Optional
from datetime import datetime
from enum import Enum

from pydantic import Field

from app.models.base import MongoModel, PyObjectId


class PaymentMethod(str, Enum):
    CASH = "cash"
    BKASH = "bkash"
    NAGAD = "nagad"
    BANK_TRANSFER = "bank_transfer"


class Payment(MongoModel):
    hostel_id: PyObjectId
    boarder_id: PyObjectId
    date: datetime
    amount: float = Field(ge=0)
    method: PaymentMethod = PaymentMethod.CASH
    reference: Optional[str] = None
    notes: Optional[str] = None

    added_by: Optional[PyObjectId] = None
