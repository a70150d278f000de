"""Admin-managed business configuration."""
from __future__ import annotations

from typing import Any

from sqlalchemy import Integer
from sqlalchemy.orm import Mapped, mapped_column

from hotel_api.db.base import JSONB_TYPE, Base
from hotel_api.models.mixins import TimestampMixin


class AppConfig(TimestampMixin, Base):
    """Single-row table holding markup and cancellation charge settings.

    ``markup`` and ``cancellation_charge`` are ``{"type": "fixed" | "percentage",
    "value": number}``; ``fees`` may carry ``service_charge``,
    ``processing_fee_percentage`` and ``gst_percentage``.
    """

    __tablename__ = "app_config"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    markup: Mapped[dict[str, Any] | None] = mapped_column(JSONB_TYPE)
    fees: Mapped[dict[str, Any] | None] = mapped_column(JSONB_TYPE)
    cancellation_charge: Mapped[dict[str, Any] | None] = mapped_column(JSONB_TYPE)
