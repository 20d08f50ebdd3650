"""Billing calculation results."""
from typing import List
from pydantic import BaseModel


class MealRateResult(BaseModel):
    """Hostel-month aggregates and the derived blended meal rate."""
    total_expense: float
    total_meals: float
    meal_rate: float


class BoarderRef(BaseModel):
    id: str
    full_name: str
    room_number: str = ""


class BoarderStatement(BaseModel):
    """
    One boarder's bill for a month.

    Invariants:
    - due >= 0, advance >= 0, never both nonzero
    - due - advance == total_bill - total_payment - opening_balance (to the cent)
    """
    boarder: BoarderRef
    month: int
    year: int
    meal_rate: float
    total_meals: float
    meal_cost: float
    seat_rent: float
    opening_balance: float
    total_bill: float
    total_payment: float
    due: float
    advance: float


class MonthlyStatementReport(BaseModel):
    hostel_id: str
    month: int
    year: int
    meal_rate: float
    total_expense: float
    total_meals: float
    total_boarders: int
    statements: List[BoarderStatement]


class DueListResponse(BaseModel):
    month: int
    year: int
    meal_rate: float
    total_due: float
    statements: List[BoarderStatement]  # due, highest first
