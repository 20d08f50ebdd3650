"""
Billing exceptions.

Services raise these; the handler registered in ``create_app`` turns them
into JSON error responses using ``status_code``.
"""

from typing import Optional
from fastapi import status


class BillingError(Exception):
    """Base class for all billing-domain failures."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class BillingValidationError(BillingError):
    """Write payload is inconsistent (bad ids, wrong hostel, etc.)."""
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(BillingError):
    """Boarder, fact row or closing record does not exist."""
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(BillingError):
    """State conflict: already locked, concurrent transition, duplicate entry."""
    status_code = status.HTTP_409_CONFLICT


class ForbiddenError(BillingError):
    """Caller may not perform this write."""
    status_code = status.HTTP_403_FORBIDDEN


class MonthLockedError(ForbiddenError):
    """Write attempted against a month whose closing is locked."""

    def __init__(self, month: int, year: int, message: str = "This month is locked."):
        self.month = month
        self.year = year
        super().__init__(message)
