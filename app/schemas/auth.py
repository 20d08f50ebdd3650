from pydantic import BaseModel
from typing import Optional


class CurrentUser(BaseModel):
    """Authenticated caller, decoded from the bearer token."""
    id: str
    hostel_id: str
    role: str  # admin | manager | boarder
    boarder_id: Optional[str] = None

    @property
    def is_manager(self) -> bool:
        return self.role == "manager"
