from typing import Optional, List
import datetime as dt
from pydantic import BaseModel, Field


class ExpenseCreate(BaseModel):
    date: dt.date
    category: str = Field(..., min_length=1, max_length=50)
    description: str = ""
    amount: float = Field(..., ge=0)
    attachment: Optional[str] = None


class ExpenseUpdate(BaseModel):
    date: Optional[dt.date] = None
    category: Optional[str] = Field(default=None, min_length=1, max_length=50)
    description: Optional[str] = None
    amount: Optional[float] = Field(default=None, ge=0)
    attachment: Optional[str] = None


class ExpenseResponse(BaseModel):
    id: str
    hostel_id: str
    date: dt.datetime
    category: str
    description: str
    amount: float
    attachment: Optional[str] = None
    is_deleted: bool
    updated_at: dt.datetime


class ExpenseBucket(BaseModel):
    key: str  # category name or YYYY-MM-DD
    total: float
    count: int


class ExpenseSummaryResponse(BaseModel):
    month: int
    year: int
    grand_total: float
    category_breakdown: List[ExpenseBucket]
    daily_breakdown: List[ExpenseBucket]
