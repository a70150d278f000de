"""Booking policy, prebook, cancellation and history endpoints."""

from __future__ import annotations

import uuid
from typing import Annotated, Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from hotel_api.api import deps
from hotel_api.core.config import Settings
from hotel_api.integrations import SupplierClient
from hotel_api.models import User
from hotel_api.schemas.booking import BookingPolicyRequest, CancelRequest, PrebookRequest
from hotel_api.services import booking_service
from hotel_api.services.notification_service import NotificationQueue

router = APIRouter()


@router.post("/bookingpolicy", summary="Fetch the booking policy of a package")
async def booking_policy(
    payload: BookingPolicyRequest,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    supplier: Annotated[SupplierClient, Depends(deps.get_supplier)],
) -> dict[str, Any]:
    return await booking_service.get_booking_policy(session, payload, supplier=supplier)


@router.post("/prebook", summary="Provisionally reserve a package")
async def prebook(
    payload: PrebookRequest,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    user_id: Annotated[uuid.UUID | None, Depends(deps.get_optional_user_id)],
    supplier: Annotated[SupplierClient, Depends(deps.get_supplier)],
    notifications: Annotated[NotificationQueue, Depends(deps.get_notifications)],
    settings: Annotated[Settings, Depends(deps.get_app_settings)],
) -> dict[str, Any]:
    """Anonymous callers are matched or registered by their contact mobile."""
    return await booking_service.prebook(
        session,
        payload,
        user_id=user_id,
        supplier=supplier,
        notifications=notifications,
        settings=settings,
    )


@router.post("/cancel", summary="Cancel a booking")
async def cancel(
    payload: CancelRequest,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
    supplier: Annotated[SupplierClient, Depends(deps.get_supplier)],
    notifications: Annotated[NotificationQueue, Depends(deps.get_notifications)],
    settings: Annotated[Settings, Depends(deps.get_app_settings)],
) -> dict[str, Any]:
    return await booking_service.cancel_booking(
        session,
        payload,
        current_user_id=current_user.id,
        supplier=supplier,
        notifications=notifications,
        settings=settings,
    )


@router.get("/transactions", summary="List the caller's bookings")
async def list_transactions(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
) -> dict[str, Any]:
    transactions = await booking_service.list_transactions(
        session, user_id=current_user.id
    )
    return {"data": transactions}
