"""
MonthlyClosing model - frozen billing snapshot for one hostel-month.

Lifecycle:
- Absent until the first lock
- lock: is_locked=True, snapshot (totals + boarder_statements) written
- unlock: is_locked=False, snapshot kept but stale
- re-lock: snapshot recomputed from current facts and overwritten
- version increments on every lock/unlock; transitions compare-and-swap on it
"""

from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel

from app.models.base import MongoModel, PyObjectId


class BoarderStatementSnapshot(BaseModel):
    """A boarder's statement as frozen at lock time."""
    boarder_id: PyObjectId
    boarder_name: str
    total_meals: float
    meal_cost: float
    seat_rent: float
    total_payment: float
    opening_balance: float
    due: float
    advance: float


class MonthlyClosing(MongoModel):
    hostel_id: PyObjectId
    month: int
    year: int

    # Hostel-level aggregates at lock time
    total_meals: float = 0
    total_expense: float = 0
    meal_rate: float = 0

    is_locked: bool = False
    locked_by: Optional[PyObjectId] = None
    locked_at: Optional[datetime] = None

    boarder_statements: List[BoarderStatementSnapshot] = []

    version: int = 0
    created_by: Optional[PyObjectId] = None
