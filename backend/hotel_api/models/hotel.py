"""Hotels materialised from supplier search results."""
from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import Float, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hotel_api.db.base import JSONB_TYPE, Base
from hotel_api.models.mixins import TimestampMixin


class Hotel(TimestampMixin, Base):
    """One supplier hotel as returned by one search call.

    Rows are not deduplicated across searches and are never reaped.
    """

    __tablename__ = "hotels"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    supplier_hotel_id: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    original_name: Mapped[str | None] = mapped_column(String(255))
    star_rating: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    region: Mapped[dict[str, Any] | None] = mapped_column(JSONB_TYPE)
    rates: Mapped[dict[str, Any]] = mapped_column(
        JSONB_TYPE, default=dict, nullable=False
    )
    payload: Mapped[dict[str, Any]] = mapped_column(
        JSONB_TYPE, default=dict, nullable=False
    )
    meta_search_vendor_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("meta_search_vendors.id", ondelete="SET NULL")
    )

    booking_policies: Mapped[list["BookingPolicy"]] = relationship(
        "BookingPolicy", back_populates="hotel"
    )

    @property
    def packages(self) -> list[dict[str, Any]]:
        return list((self.rates or {}).get("packages") or [])

    def find_package(self, booking_key: str) -> dict[str, Any] | None:
        for package in self.packages:
            if package.get("booking_key") == booking_key:
                return package
        return None

    def snapshot(self) -> dict[str, Any]:
        """Serialise the hotel for embedding in a transaction record."""
        data = dict(self.payload or {})
        data.update(
            {
                "hotelId": str(self.id),
                "id": self.supplier_hotel_id,
                "name": self.name,
                "originalName": self.original_name or self.name,
                "starRating": data.get("starRating", self.star_rating),
                "rates": self.rates,
            }
        )
        return data


class MetaSearchVendor(TimestampMixin, Base):
    """Meta-search site (e.g. trivago) that referred a package search."""

    __tablename__ = "meta_search_vendors"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    vendor_name: Mapped[str] = mapped_column(String(120), nullable=False)
    reference_id: Mapped[str] = mapped_column(
        String(120), unique=True, index=True, nullable=False
    )
