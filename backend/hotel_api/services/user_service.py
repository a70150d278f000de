"""Customer account helpers used by the booking flow."""
from __future__ import annotations

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from hotel_api.core.security import (
    generate_temporary_password,
    get_password_hash,
    verify_password,
)
from hotel_api.models import User
from hotel_api.schemas.booking import ContactDetail
from hotel_api.services.notification_service import (
    NotificationQueue,
    build_account_created_sms,
)

logger = logging.getLogger(__name__)


async def get_user_by_mobile(session: AsyncSession, mobile: str) -> User | None:
    result = await session.execute(select(User).where(User.mobile == mobile))
    return result.scalar_one_or_none()


async def authenticate(session: AsyncSession, *, mobile: str, password: str) -> User | None:
    user = await get_user_by_mobile(session, mobile)
    if user is None or not verify_password(password, user.hashed_password):
        return None
    return user


async def get_or_create_guest_user(
    session: AsyncSession,
    *,
    contact: ContactDetail,
    notifications: NotificationQueue,
    brand: str,
) -> uuid.UUID:
    """Return the account owning ``contact.mobile``, creating it if needed.

    New accounts are pre-verified and receive their generated password by SMS.
    """
    existing = await get_user_by_mobile(session, contact.mobile)
    if existing is not None:
        return existing.id

    password = generate_temporary_password()
    user = User(
        name=contact.name,
        last_name=contact.last_name,
        mobile=contact.mobile,
        email=contact.email,
        hashed_password=get_password_hash(password),
        verified=True,
    )
    session.add(user)
    try:
        await session.commit()
    except IntegrityError:
        # a concurrent prebook registered the same mobile first
        await session.rollback()
        existing = await get_user_by_mobile(session, contact.mobile)
        if existing is None:
            raise
        return existing.id

    logger.info("Created guest account %s for prebook", user.id)
    notifications.enqueue_sms(
        notifications.international(contact.mobile),
        build_account_created_sms(brand=brand, password=password),
        operation="prebook",
        user_id=str(user.id),
    )
    return user.id
