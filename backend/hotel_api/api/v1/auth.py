"""Authentication endpoints."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from hotel_api.api.deps import get_db_session
from hotel_api.core.security import create_access_token
from hotel_api.schemas.booking import LoginRequest, TokenResponse
from hotel_api.services import user_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/token", response_model=TokenResponse, summary="Obtain access token")
async def login_for_access_token(
    payload: LoginRequest,
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> TokenResponse:
    """Validate mobile and password and issue a bearer token."""
    user = await user_service.authenticate(
        session, mobile=payload.mobile, password=payload.password
    )
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect mobile or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    logger.info("Issued access token for user %s", user.id)
    return TokenResponse(access_token=create_access_token(str(user.id)))
