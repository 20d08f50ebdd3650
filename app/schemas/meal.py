from typing import Optional, List
import datetime as dt
from pydantic import BaseModel, Field

from app.models.meal import CustomMeal


class MealComponents(BaseModel):
    breakfast: float = Field(default=0, ge=0)
    lunch: float = Field(default=0, ge=0)
    dinner: float = Field(default=0, ge=0)
    custom_meals: List[CustomMeal] = []
    is_off: bool = False


class MealCreate(MealComponents):
    """Add one boarder's meals for one day."""
    boarder_id: str
    date: dt.date


class BulkMealItem(MealComponents):
    boarder_id: str


class BulkMealRequest(BaseModel):
    """Create-or-update many boarders' meals for a single day."""
    date: dt.date
    entries: List[BulkMealItem]


class MealUpdate(BaseModel):
    """Partial update; omitted fields keep their stored value."""
    breakfast: Optional[float] = Field(default=None, ge=0)
    lunch: Optional[float] = Field(default=None, ge=0)
    dinner: Optional[float] = Field(default=None, ge=0)
    custom_meals: Optional[List[CustomMeal]] = None
    is_off: Optional[bool] = None


class MealResponse(BaseModel):
    id: str
    hostel_id: str
    boarder_id: str
    date: dt.datetime
    breakfast: float
    lunch: float
    dinner: float
    custom_meals: List[CustomMeal]
    is_off: bool
    total_meals: float
    updated_at: dt.datetime


class BulkMealError(BaseModel):
    boarder_id: str
    error: str


class BulkMealResponse(BaseModel):
    data: List[MealResponse]
    errors: List[BulkMealError] = []
    count: int


class MealSummaryRow(BaseModel):
    boarder_id: str
    boarder_name: str
    room_number: str
    total_meals: float = 0
    total_breakfast: float = 0
    total_lunch: float = 0
    total_dinner: float = 0
    days_present: int = 0


class MealSummaryResponse(BaseModel):
    month: int
    year: int
    grand_total: float
    data: List[MealSummaryRow]
