from typing import Optional
from datetime import datetime
from enum import Enum

from pydantic import Field

from app.models.base import MongoModel, PyObjectId


class ExpenseCategory(str, Enum):
    BAZAR = "bazar"
    GAS = "gas"
    SALARY = "salary"
    UTILITIES = "utilities"
    OTHERS = "others"


class Expense(MongoModel):
    hostel_id: PyObjectId
    date: datetime
    category: str = ExpenseCategory.OTHERS.value  # open string in practice
    description: str = ""
    amount: float = Field(ge=0)
    attachment: Optional[str] = None

    added_by: Optional[PyObjectId] = None
    is_deleted: bool = False
