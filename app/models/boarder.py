from typing import Optional
from datetime import datetime
from enum import Enum

from pydantic import Field

from app.models.base import MongoModel, PyObjectId, _utcnow


class BoarderStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class Boarder(MongoModel):
    """
    Resident billed for meals and seat rent within one hostel.

    opening_balance is signed and enters the bill as
    ``total_bill - payments - opening_balance``: a positive value
    reduces what the boarder owes.
    """
    hostel_id: PyObjectId
    user_id: Optional[PyObjectId] = None

    full_name: str
    room_number: str = ""
    phone: str = ""
    email: str = ""

    seat_rent: float = Field(default=0, ge=0)
    opening_balance: float = 0

    status: BoarderStatus = BoarderStatus.ACTIVE
    join_date: datetime = Field(default_factory=_utcnow)
    is_deleted: bool = False


class BoarderScope(str, Enum):
    """
    Which boarders a hostel-wide report covers.

    ALL: every non-deleted boarder, so deactivated boarders who still owe
    stay visible (due list, lock snapshot, monthly summary).
    ACTIVE: non-deleted boarders with status "active" (dashboard headcount,
    meal summary).
    """
    ALL = "all"
    ACTIVE = "active"
