"""Booking transaction aggregate."""
from __future__ import annotations

import enum
import uuid
from typing import Any

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hotel_api.db.base import JSONB_TYPE, Base
from hotel_api.models.mixins import TimestampMixin


class TransactionStatus(int, enum.Enum):
    """Lifecycle states for hotel bookings."""

    PREBOOKED = 0
    CONFIRMED = 1
    CANCELLED = 2


class Transaction(TimestampMixin, Base):
    """Durable record of one booking from prebook through cancellation."""

    __tablename__ = "transactions"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    user_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), index=True
    )
    transaction_identifier: Mapped[str] = mapped_column(
        String(128), index=True, nullable=False
    )
    status: Mapped[int] = mapped_column(
        Integer, default=TransactionStatus.PREBOOKED.value, nullable=False
    )
    search: Mapped[dict[str, Any]] = mapped_column(JSONB_TYPE, nullable=False)
    booking_policy: Mapped[dict[str, Any]] = mapped_column(JSONB_TYPE, nullable=False)
    contact_detail: Mapped[dict[str, Any]] = mapped_column(JSONB_TYPE, nullable=False)
    coupon: Mapped[dict[str, Any] | None] = mapped_column(JSONB_TYPE)
    hotel: Mapped[dict[str, Any]] = mapped_column(JSONB_TYPE, nullable=False)
    hotel_package: Mapped[dict[str, Any]] = mapped_column(JSONB_TYPE, nullable=False)
    pricing: Mapped[dict[str, Any]] = mapped_column(JSONB_TYPE, nullable=False)
    prebook_response: Mapped[dict[str, Any] | None] = mapped_column(JSONB_TYPE)
    payment_response: Mapped[dict[str, Any] | None] = mapped_column(JSONB_TYPE)
    book_response: Mapped[dict[str, Any] | None] = mapped_column(JSONB_TYPE)
    cancel_response: Mapped[dict[str, Any] | None] = mapped_column(JSONB_TYPE)

    user: Mapped["User | None"] = relationship("User", back_populates="transactions")

    @property
    def supplier_booking_id(self) -> str | None:
        data = (self.prebook_response or {}).get("data") or {}
        booking_id = data.get("booking_id")
        return str(booking_id) if booking_id is not None else None
