from typing import Optional, List, Union
from datetime import datetime
from pydantic import BaseModel, Field

from app.schemas.calculation import MonthlyStatementReport


class MonthPeriod(BaseModel):
    """Request body naming a hostel-month."""
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=2000, le=2100)


class BoarderStatementSnapshotResponse(BaseModel):
    boarder_id: str
    boarder_name: str
    total_meals: float
    meal_cost: float
    seat_rent: float
    total_payment: float
    opening_balance: float
    due: float
    advance: float


class MonthlyClosingResponse(BaseModel):
    id: str
    hostel_id: str
    month: int
    year: int
    total_meals: float
    total_expense: float
    meal_rate: float
    is_locked: bool
    locked_by: Optional[str] = None
    locked_at: Optional[datetime] = None
    boarder_statements: List[BoarderStatementSnapshotResponse]
    version: int
    updated_at: datetime


class ClosingDetailsResponse(BaseModel):
    """Stored closing, or a live preview when the month was never locked."""
    is_locked: bool
    data: Union[MonthlyClosingResponse, MonthlyStatementReport]
