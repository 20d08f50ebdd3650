from typing import List
from pydantic import BaseModel

from app.schemas.calculation import BoarderStatement
from app.schemas.payment import PaymentResponse


class DashboardResponse(BaseModel):
    month: int
    year: int
    total_boarders: int  # active boarders only
    total_meals: float
    total_expense: float
    meal_rate: float
    total_due: float
    total_payment: float
    collection_rate: int  # percent of billed amount collected


class BoarderDashboardResponse(BaseModel):
    statement: BoarderStatement
    recent_payments: List[PaymentResponse]
