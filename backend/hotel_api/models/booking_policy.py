"""Booking policies returned by the supplier for one package."""
from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hotel_api.db.base import JSONB_TYPE, Base
from hotel_api.models.mixins import TimestampMixin


class BookingPolicy(TimestampMixin, Base):
    """Supplier cancellation policy together with the priced package."""

    __tablename__ = "booking_policies"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    booking_policy_id: Mapped[str] = mapped_column(
        String(128), index=True, nullable=False
    )
    transaction_identifier: Mapped[str] = mapped_column(
        String(128), index=True, nullable=False
    )
    booking_policy: Mapped[dict[str, Any]] = mapped_column(JSONB_TYPE, nullable=False)
    search: Mapped[dict[str, Any]] = mapped_column(JSONB_TYPE, nullable=False)
    hotel_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("hotels.id", ondelete="CASCADE"), nullable=False
    )

    hotel: Mapped["Hotel"] = relationship("Hotel", back_populates="booking_policies")

    @property
    def package(self) -> dict[str, Any]:
        return dict(self.booking_policy.get("package") or {})
