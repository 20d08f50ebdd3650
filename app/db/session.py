from fastapi import Request

from app.utils.month_locks import MonthLockRegistry


async def get_db(request: Request):
    """Return the database handle opened at startup."""
    return request.app.state.mongo.db


async def get_month_locks(request: Request) -> MonthLockRegistry:
    """Return the per-month write lock registry created at startup."""
    return request.app.state.month_locks
