"""
Test bearer token handling and role checks
"""
from datetime import timedelta

import pytest
from bson import ObjectId
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from jose import jwt

from app.core.auth import create_access_token, get_current_user, require_roles
from app.core.config import settings
from app.schemas.auth import CurrentUser


def _credentials(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


def test_token_carries_hostel_and_role():
    hostel_id = str(ObjectId())
    token = create_access_token("u1", hostel_id, "manager")

    payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])

    assert payload["sub"] == "u1"
    assert payload["hostel_id"] == hostel_id
    assert payload["role"] == "manager"
    assert "boarder_id" not in payload
    assert payload["exp"] > payload["iat"]


@pytest.mark.asyncio
async def test_get_current_user_decodes_token():
    boarder_id = str(ObjectId())
    token = create_access_token("u1", "h1", "boarder", boarder_id=boarder_id)

    user = await get_current_user(_credentials(token))

    assert user == CurrentUser(id="u1", hostel_id="h1", role="boarder", boarder_id=boarder_id)
    assert user.is_manager is False


@pytest.mark.asyncio
async def test_expired_token_rejected():
    token = create_access_token("u1", "h1", "admin", expires_delta=timedelta(minutes=-1))

    with pytest.raises(HTTPException) as exc:
        await get_current_user(_credentials(token))
    assert exc.value.status_code == 401


@pytest.mark.asyncio
async def test_token_without_hostel_rejected():
    token = jwt.encode({"sub": "u1"}, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    with pytest.raises(HTTPException) as exc:
        await get_current_user(_credentials(token))
    assert exc.value.status_code == 401


@pytest.mark.asyncio
async def test_require_roles():
    checker = require_roles("admin")
    admin = CurrentUser(id="u1", hostel_id="h1", role="admin")
    manager = CurrentUser(id="u2", hostel_id="h1", role="manager")

    assert await checker(current_user=admin) is admin
    with pytest.raises(HTTPException) as exc:
        await checker(current_user=manager)
    assert exc.value.status_code == 403
    assert exc.value.detail == "Role 'manager' is not authorized to access this route"
