from typing import Optional

from fastapi import Query

from app.schemas.closing import MonthPeriod
from app.utils.billing import utc_today


async def get_period(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=2000, le=2100)
) -> MonthPeriod:
    """month/year query params, defaulting to the current month."""
    today = utc_today()
    return MonthPeriod(
        month=month if month is not None else today.month,
        year=year if year is not None else today.year
    )
