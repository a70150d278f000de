"""Common API dependencies."""

from __future__ import annotations

import uuid
from typing import Annotated
from collections.abc import AsyncGenerator

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from hotel_api.cache import SearchCache
from hotel_api.core.config import Settings, get_settings
from hotel_api.core.security import decode_access_token
from hotel_api.db.session import get_session
from hotel_api.integrations import SupplierClient
from hotel_api.models import User
from hotel_api.services.notification_service import NotificationQueue

settings = get_settings()

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.api_v1_prefix}/auth/token")
optional_oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.api_v1_prefix}/auth/token", auto_error=False
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide an async database session."""
    async for session in get_session():
        yield session


def _user_id_from_token(token: str) -> uuid.UUID | None:
    try:
        payload = decode_access_token(token)
    except JWTError:
        return None
    subject = payload.get("sub")
    try:
        return uuid.UUID(str(subject)) if subject is not None else None
    except ValueError:
        return None


async def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> User:
    """Authenticate request via bearer token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    user_id = _user_id_from_token(token)
    if user_id is None:
        raise credentials_exception
    user = await session.get(User, user_id)
    if user is None or not user.verified:
        raise credentials_exception
    return user


async def get_optional_user_id(
    token: Annotated[str | None, Depends(optional_oauth2_scheme)],
) -> uuid.UUID | None:
    """Return the caller's id, or ``None`` for anonymous or unverifiable tokens."""
    if not token:
        return None
    return _user_id_from_token(token)


def get_app_settings() -> Settings:
    return get_settings()


def get_search_cache(request: Request) -> SearchCache:
    return request.app.state.search_cache


def get_supplier(request: Request) -> SupplierClient:
    return request.app.state.supplier


def get_notifications(request: Request) -> NotificationQueue:
    return request.app.state.notifications
