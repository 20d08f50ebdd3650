"""Billing arithmetic and calendar helpers."""
import calendar
import math
from datetime import date, datetime, timezone
from typing import Iterable, Tuple


def round2(value: float) -> float:
    """
    Round to 2 decimals, half away from zero on the cents digit.

    Multiplies by 100, rounds, divides by 100 (float arithmetic, no Decimal).
    """
    if not value:
        return 0.0
    rounded = math.floor(abs(value) * 100 + 0.5) / 100
    if rounded == 0:
        return 0.0
    return -rounded if value < 0 else rounded


def month_bounds(month: int, year: int) -> Tuple[datetime, datetime]:
    """
    Inclusive [start, end] range of a calendar month.

    start = day 1 00:00:00, end = last day 23:59:59.
    """
    if not 1 <= month <= 12:
        raise ValueError(f"month must be 1-12, got {month}")
    last_day = calendar.monthrange(year, month)[1]
    start = datetime(year, month, 1)
    end = datetime(year, month, last_day, 23, 59, 59)
    return start, end


def day_start(value: date | datetime) -> datetime:
    """Normalise a date or datetime to 00:00:00 of its day."""
    return datetime(value.year, value.month, value.day)


def compute_total_meals(
    breakfast: float,
    lunch: float,
    dinner: float,
    custom_values: Iterable[float],
    is_off: bool
) -> float:
    """Total meal units for one boarder-day; an off day counts as zero."""
    if is_off:
        return 0
    return breakfast + lunch + dinner + sum(custom_values)


def split_net_due(net_due: float) -> Tuple[float, float]:
    """
    Split a signed balance into (due, advance).

    Positive net -> due, negative -> advance, exactly zero -> both zero.
    """
    due = round2(net_due) if net_due > 0 else 0
    advance = round2(abs(net_due)) if net_due < 0 else 0
    return due, advance


def utc_today() -> datetime:
    """00:00:00 of the current UTC day, naive like stored fact dates."""
    now = datetime.now(timezone.utc)
    return datetime(now.year, now.month, now.day)
