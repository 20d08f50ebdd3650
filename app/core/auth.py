from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from jose import JWTError, jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer

from app.core.config import settings
from app.schemas.auth import CurrentUser

security = HTTPBearer()

def create_access_token(
    user_id: str,
    hostel_id: str,
    role: str,
    boarder_id: Optional[str] = None,
    expires_delta: timedelta | None = None
) -> str:
    """Create JWT access token."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    now = datetime.now(timezone.utc)
    expire = now + expires_delta

    payload = {
        "sub": user_id,
        "hostel_id": hostel_id,
        "role": role,
        "exp": int(expire.timestamp()),
        "iat": int(now.timestamp())
    }
    if boarder_id:
        payload["boarder_id"] = boarder_id

    encoded_jwt = jwt.encode(
        payload,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM
    )
    return encoded_jwt

async def get_current_user(credentials = Depends(security)) -> CurrentUser:
    """Get current user from JWT token."""
    token = credentials.credentials

    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token"
        )

    user_id = payload.get("sub")
    hostel_id = payload.get("hostel_id")
    if user_id is None or hostel_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token"
        )

    return CurrentUser(
        id=user_id,
        hostel_id=hostel_id,
        role=payload.get("role", "boarder"),
        boarder_id=payload.get("boarder_id")
    )

def require_roles(*roles: str) -> Callable:
    """Build a dependency that only lets the given roles through."""

    async def checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role '{current_user.role}' is not authorized to access this route"
            )
        return current_user

    return checker
