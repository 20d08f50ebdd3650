from typing import Optional, List
from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from app.models.base import MongoModel, PyObjectId
from app.utils.billing import compute_total_meals


class CustomMeal(BaseModel):
    """Named extra meal contribution, e.g. a feast or guest meal."""
    name: str
    value: float = Field(default=0, ge=0)


class MealEntry(MongoModel):
    """
    One row per (boarder, day) per hostel.

    total_meals is always derived: breakfast + lunch + dinner + custom values,
    or 0 with every component zeroed when the day is marked off.
    """
    hostel_id: PyObjectId
    boarder_id: PyObjectId
    date: datetime  # 00:00:00 of the day

    breakfast: float = Field(default=0, ge=0)
    lunch: float = Field(default=0, ge=0)
    dinner: float = Field(default=0, ge=0)
    custom_meals: List[CustomMeal] = []

    is_off: bool = False
    total_meals: float = 0

    added_by: Optional[PyObjectId] = None

    @model_validator(mode="after")
    def _derive_total(self):
        if self.is_off:
            self.breakfast = 0
            self.lunch = 0
            self.dinner = 0
            self.custom_meals = [CustomMeal(name=m.name) for m in self.custom_meals]
        self.total_meals = compute_total_meals(
            self.breakfast,
            self.lunch,
            self.dinner,
            (m.value for m in self.custom_meals),
            self.is_off
        )
        return self
