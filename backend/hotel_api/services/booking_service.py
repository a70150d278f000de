"""Booking policy, prebook, cancellation and document lookups."""
from __future__ import annotations

import copy
import logging
import uuid
from collections.abc import Sequence
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from hotel_api.core.config import Settings
from hotel_api.core.errors import (
    AuthorizationError,
    DocumentGenerationError,
    MarkupError,
    NotFoundError,
    PersistenceError,
    ServiceError,
    UpstreamError,
)
from hotel_api.integrations import SupplierClient, SupplierClientError
from hotel_api.models import AppConfig, BookingPolicy, Transaction, TransactionStatus
from hotel_api.schemas.booking import (
    BookingPolicyRequest,
    CancelRequest,
    ContactDetail,
    GuestEntry,
    PrebookRequest,
)
from hotel_api.services import markup_service, pricing_service, user_service
from hotel_api.services.notification_service import (
    NotificationQueue,
    build_admin_cancellation_sms,
    build_guest_cancellation_sms,
)
from hotel_api.services.search_service import get_hotel

logger = logging.getLogger(__name__)


def _parse_uuid(value: str | uuid.UUID, message: str) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError as exc:
        raise NotFoundError(message) from exc


async def get_booking_policy(
    session: AsyncSession,
    payload: BookingPolicyRequest,
    *,
    supplier: SupplierClient,
) -> dict[str, Any]:
    """Fetch, price and store the supplier booking policy for one package."""
    hotel = await get_hotel(session, payload.hotel_id)
    if not hotel.packages:
        logger.error("Hotel %s has no valid packages", hotel.id)
        raise NotFoundError("Hotel has no valid packages")
    package = hotel.find_package(payload.booking_key)
    if package is None:
        logger.error("No package of hotel %s has booking key %s", hotel.id, payload.booking_key)
        raise NotFoundError("Unable to get the booking policy")

    try:
        data = await supplier.get_booking_policy(
            payload.transaction_id, payload.search, package
        )
    except SupplierClientError as exc:
        logger.exception("bookingpolicy failed upstream for %s", payload.transaction_id)
        raise UpstreamError("Unable to get the booking policy") from exc

    policy = data.get("data")
    if not policy:
        logger.error("bookingpolicy for %s returned no data", payload.transaction_id)
        raise UpstreamError("Unable to get the booking policy")

    rule = await markup_service.load_markup_rule(session)
    try:
        markup_service.add_markup(policy.get("package"), rule)
    except MarkupError as exc:
        logger.exception("Markup failed for booking policy of %s", payload.transaction_id)
        raise ServiceError(f"Unable to price the booking policy: {exc}") from exc

    record = BookingPolicy(
        booking_policy_id=str(policy.get("booking_policy_id")),
        transaction_identifier=payload.transaction_id,
        booking_policy=copy.deepcopy(policy),
        search=payload.search,
        hotel_id=hotel.id,
    )
    session.add(record)
    try:
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.exception("Saving booking policy for %s failed", payload.transaction_id)
        raise PersistenceError("Unable to save the booking policy") from exc
    return data


async def find_booking_policy(
    session: AsyncSession, *, booking_policy_id: str, transaction_identifier: str
) -> BookingPolicy | None:
    stmt = (
        select(BookingPolicy)
        .options(selectinload(BookingPolicy.hotel))
        .where(
            BookingPolicy.booking_policy_id == booking_policy_id,
            BookingPolicy.transaction_identifier == transaction_identifier,
        )
        .order_by(BookingPolicy.created_at.desc())
        .limit(1)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


def _room_count(search: dict[str, Any]) -> int:
    for key in ("room_count", "total_room_count"):
        try:
            count = int(search.get(key) or 0)
        except (TypeError, ValueError):
            count = 0
        if count > 0:
            return count
    return len(search.get("details") or []) or 1


def build_prebook_payload(
    *,
    transaction_identifier: str,
    booking_policy_id: str,
    room_count: int,
    contact: ContactDetail,
    guests: Sequence[GuestEntry] | None,
    nationality: str,
) -> dict[str, Any]:
    """Assemble the supplier prebook request.

    Every room gets the contact person as lead guest.
    """
    room_lead_guests = [
        {
            "first_name": contact.name,
            "last_name": contact.last_name,
            "nationality": nationality,
        }
        for _ in range(room_count)
    ]
    room_guests = [
        {
            "first_name": entry.room_guest[0].firstname,
            "last_name": entry.room_guest[0].lastname,
            "contact_no": entry.room_guest[0].mobile,
            "nationality": entry.room_guest[0].nationality,
        }
        for entry in guests or []
    ]
    return {
        "transaction_identifier": transaction_identifier,
        "booking_policy_id": booking_policy_id,
        "room_lead_guests": room_lead_guests,
        "contact_person": {
            "salutation": "Mr.",
            "first_name": contact.name,
            "last_name": contact.last_name,
            "email": contact.email,
            "contact_no": contact.mobile,
        },
        "guests": room_guests,
    }


async def prebook(
    session: AsyncSession,
    payload: PrebookRequest,
    *,
    user_id: uuid.UUID | None,
    supplier: SupplierClient,
    notifications: NotificationQueue,
    settings: Settings,
) -> dict[str, Any]:
    """Provisionally reserve the package behind a stored booking policy."""
    contact = payload.contact_detail
    if user_id is None:
        user_id = await user_service.get_or_create_guest_user(
            session,
            contact=contact,
            notifications=notifications,
            brand=settings.brand_name,
        )

    policy = await find_booking_policy(
        session,
        booking_policy_id=payload.booking_policy_id,
        transaction_identifier=payload.transaction_id,
    )
    if policy is None:
        raise NotFoundError("Booking policy not found")

    hotel_package = policy.package
    coupon = pricing_service.Coupon.from_payload(
        payload.coupon.model_dump() if payload.coupon else None
    )
    pricing = pricing_service.compute_pricing(hotel_package, coupon)

    request = build_prebook_payload(
        transaction_identifier=payload.transaction_id,
        booking_policy_id=str(policy.booking_policy.get("booking_policy_id")),
        room_count=_room_count(policy.search),
        contact=contact,
        guests=payload.guest,
        nationality=settings.default_nationality,
    )
    try:
        data = await supplier.prebook(request)
    except SupplierClientError as exc:
        logger.exception("prebook failed upstream for %s", payload.transaction_id)
        raise UpstreamError("Cannot book selected hotel!") from exc
    if not data.get("data"):
        logger.error("prebook for %s returned no data", payload.transaction_id)
        raise UpstreamError("Cannot book selected hotel!")

    transaction = Transaction(
        user_id=user_id,
        transaction_identifier=payload.transaction_id,
        status=TransactionStatus.PREBOOKED.value,
        search=policy.search,
        booking_policy=policy.booking_policy,
        contact_detail=contact.model_dump(),
        coupon=payload.coupon.model_dump() if payload.coupon else None,
        hotel=policy.hotel.snapshot(),
        hotel_package=hotel_package,
        pricing=pricing.to_dict(),
        prebook_response=data,
    )
    session.add(transaction)
    try:
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        # the supplier already holds the booking at this point
        logger.exception(
            "Prebook %s succeeded upstream but the transaction was not saved",
            payload.transaction_id,
        )
        raise PersistenceError("Cannot book selected hotel") from exc

    response = dict(data)
    response["transactionid"] = str(transaction.id)
    return response


async def mark_confirmed(
    session: AsyncSession,
    *,
    transaction_id: uuid.UUID,
    payment_response: dict[str, Any],
    book_response: dict[str, Any] | None = None,
) -> Transaction:
    """Record a successful payment; called by the payment collaborator."""
    transaction = await session.get(Transaction, transaction_id)
    if transaction is None:
        raise NotFoundError("Invalid transaction id")
    transaction.payment_response = payment_response
    if book_response is not None:
        transaction.book_response = book_response
    transaction.status = TransactionStatus.CONFIRMED.value
    await session.commit()
    return transaction


async def _load_cancellation_charge(session: AsyncSession) -> dict[str, Any] | None:
    try:
        result = await session.execute(select(AppConfig).order_by(AppConfig.id).limit(1))
    except SQLAlchemyError:
        logger.exception("Reading cancellation charge configuration failed")
        return None
    config = result.scalar_one_or_none()
    return config.cancellation_charge if config is not None else None


async def cancel_booking(
    session: AsyncSession,
    payload: CancelRequest,
    *,
    current_user_id: uuid.UUID,
    supplier: SupplierClient,
    notifications: NotificationQueue,
    settings: Settings,
) -> dict[str, Any]:
    """Cancel a booking with the supplier and record penalty and refund.

    The prior status is not checked, so prebooked or already cancelled
    transactions are sent to the supplier as well.
    """
    try:
        requested_user_id = uuid.UUID(payload.user.id)
    except ValueError as exc:
        raise AuthorizationError() from exc
    if requested_user_id != current_user_id:
        raise AuthorizationError()

    transaction_id = _parse_uuid(
        payload.transaction_id, "Invalid transaction id, please try again"
    )
    transaction = await session.get(Transaction, transaction_id)
    if transaction is None:
        raise NotFoundError("Invalid transaction id, please try again")
    if transaction.user_id != current_user_id:
        logger.warning(
            "User %s tried to cancel transaction %s owned by another user",
            current_user_id,
            transaction.id,
        )
        raise AuthorizationError()

    cancellation_charge = await _load_cancellation_charge(session)
    try:
        pricing_service.validate_cancellation_charge(cancellation_charge)
    except ServiceError:
        logger.error(
            "Cannot cancel transaction %s: cancellation charge is not configured",
            transaction.id,
        )
        raise

    booking_id = transaction.supplier_booking_id
    if booking_id is None:
        logger.error("Transaction %s has no supplier booking id", transaction.id)
        raise ServiceError("Booking cannot be cancelled, please try again.")

    try:
        data = await supplier.cancel(booking_id)
    except SupplierClientError as exc:
        logger.exception("cancel failed upstream for transaction %s", transaction.id)
        raise UpstreamError("Booking cannot be cancelled, please try again.") from exc

    details = (data.get("data") or {}).get("cancellation_details")
    if not isinstance(details, dict):
        logger.error("cancel for transaction %s returned no details", transaction.id)
        raise UpstreamError("Booking cannot be cancelled")

    quote = pricing_service.compute_refund(
        base_amount=(transaction.pricing or {}).get("base_amount_discount_included"),
        cancellation_charge=cancellation_charge,
        api_penalty_percentage=details.get("api_penalty_percentage"),
        currency=(details.get("api_penalty") or {}).get("currency"),
    )
    details["penalty"] = quote.penalty()
    details["cancellation_charge"] = quote.charge()
    details["refund"] = quote.refund()
    details["penalty_percentage"] = quote.percentage()

    transaction.cancel_response = copy.deepcopy(data)
    transaction.status = TransactionStatus.CANCELLED.value
    try:
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.exception("Saving cancellation of transaction %s failed", transaction.id)
        raise PersistenceError("Booking cannot be cancelled") from exc

    details.pop("api_penalty", None)
    details.pop("api_penalty_percentage", None)

    contact = transaction.contact_detail or {}
    hotel_name = (transaction.hotel or {}).get("originalName") or (
        transaction.hotel or {}
    ).get("name")
    notifications.enqueue_sms(
        notifications.international(contact.get("mobile", "")),
        build_guest_cancellation_sms(hotel_name=hotel_name),
        operation="cancel",
        transaction_id=str(transaction.id),
    )
    notifications.enqueue_sms(
        settings.admin_mobile,
        build_admin_cancellation_sms(
            hotel_name=hotel_name,
            guest_name=contact.get("name", ""),
            mobile=contact.get("mobile", ""),
        ),
        operation="cancel",
        transaction_id=str(transaction.id),
    )
    return data


def _summarise(transaction: Transaction) -> dict[str, Any]:
    hotel = {key: value for key, value in (transaction.hotel or {}).items() if key != "rates"}
    package = ((transaction.prebook_response or {}).get("data") or {}).get("package") or {}
    prebook_response = {
        "data": {
            "package": {
                key: package.get(key)
                for key in (
                    "adult_count",
                    "check_in_date",
                    "check_out_date",
                    "child_count",
                    "room_count",
                    "room_details",
                    "rate_type",
                )
            }
        }
    }
    cancel_response: dict[str, Any] = {}
    cancel_data = (transaction.cancel_response or {}).get("data")
    if cancel_data:
        cancel_response["data"] = {
            "cancellation_details": cancel_data.get("cancellation_details"),
            "cancellation_policy": cancel_data.get("cancellation_policy"),
        }
    book_response: dict[str, Any] = {}
    if (transaction.book_response or {}).get("data"):
        book_response["data"] = transaction.book_response["data"]
    return {
        "bookingId": str(transaction.id),
        "search": transaction.search,
        "hotel": hotel,
        "cancellation_policy": (transaction.booking_policy or {}).get("cancellation_policy"),
        "contact_details": transaction.contact_detail,
        "coupon": transaction.coupon,
        "hotel_package": transaction.hotel_package,
        "status": transaction.status,
        "pricing": transaction.pricing,
        "prebook_response": prebook_response,
        "payment_response": transaction.payment_response or {},
        "book_response": book_response,
        "cancel_response": cancel_response,
        "created_at": transaction.created_at.isoformat() if transaction.created_at else None,
    }


async def list_transactions(
    session: AsyncSession, *, user_id: uuid.UUID
) -> list[dict[str, Any]]:
    """Return the user's bookings, newest first."""
    result = await session.execute(
        select(Transaction)
        .where(Transaction.user_id == user_id)
        .order_by(Transaction.created_at.desc())
    )
    return [_summarise(transaction) for transaction in result.scalars().all()]


async def get_confirmed_transaction(
    session: AsyncSession,
    *,
    transaction_id: str | None,
    user_id: uuid.UUID,
    document: str,
) -> Transaction:
    """Load a paid transaction owned by ``user_id`` for document rendering."""
    if not transaction_id:
        raise DocumentGenerationError(f"Cannot get {document} for the given transaction")
    key = _parse_uuid(transaction_id, "Invalid booking id")
    transaction = await session.get(Transaction, key)
    if transaction is None:
        raise NotFoundError("Invalid booking id")
    if transaction.user_id != user_id:
        raise AuthorizationError("Not Authorized!")
    if transaction.status != TransactionStatus.CONFIRMED:
        raise DocumentGenerationError(
            f"Cannot get {document} for incomplete transaction"
        )
    return transaction
