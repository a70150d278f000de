"""Markup application for supplier packages."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Mapping

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hotel_api.core.errors import MarkupError
from hotel_api.models import AppConfig

logger = logging.getLogger(__name__)

_MONEY_PLACES = Decimal("0.01")
_HUNDRED = Decimal("100")


def _money(value: Decimal) -> float:
    return float(value.quantize(_MONEY_PLACES, rounding=ROUND_HALF_UP))


def _decimal(value: Any, default: Decimal | None = None) -> Decimal:
    if value is None or value == "":
        if default is None:
            raise MarkupError("missing value")
        return default
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise MarkupError(f"invalid numeric value {value!r}") from exc
    if not result.is_finite():
        raise MarkupError(f"invalid numeric value {value!r}")
    return result


@dataclass(slots=True, frozen=True)
class MarkupRule:
    """Margin and fee settings applied on top of the supplier rate."""

    markup_type: str = "percentage"
    markup_value: Decimal = Decimal("0")
    service_charge: Decimal = Decimal("0")
    processing_fee_percentage: Decimal = Decimal("0")
    gst_percentage: Decimal = Decimal("0")

    @classmethod
    def from_config(cls, config: AppConfig | None) -> "MarkupRule":
        if config is None:
            return cls()
        markup = config.markup or {}
        fees = config.fees or {}
        try:
            return cls(
                markup_type=str(markup.get("type") or "percentage"),
                markup_value=_decimal(markup.get("value"), Decimal("0")),
                service_charge=_decimal(fees.get("service_charge"), Decimal("0")),
                processing_fee_percentage=_decimal(
                    fees.get("processing_fee_percentage"), Decimal("0")
                ),
                gst_percentage=_decimal(fees.get("gst_percentage"), Decimal("0")),
            )
        except MarkupError:
            logger.exception("Invalid markup configuration; falling back to no markup")
            return cls()


async def load_markup_rule(session: AsyncSession) -> MarkupRule:
    """Read the admin markup configuration."""
    result = await session.execute(select(AppConfig).order_by(AppConfig.id).limit(1))
    return MarkupRule.from_config(result.scalar_one_or_none())


def add_markup(package: dict[str, Any], rule: MarkupRule) -> dict[str, Any]:
    """Price a supplier package in place and return it.

    Raises ``MarkupError`` when the package carries no usable chargeable rate.
    """

    if not isinstance(package, dict):
        raise MarkupError("package is not an object")
    chargeable_rate = _decimal(package.get("chargeable_rate"))
    if chargeable_rate < 0:
        raise MarkupError("negative chargeable rate")

    if rule.markup_type == "fixed":
        markup = rule.markup_value
    elif rule.markup_type == "percentage":
        markup = rule.markup_value / _HUNDRED * chargeable_rate
    else:
        raise MarkupError(f"unknown markup type {rule.markup_type!r}")

    base_amount = chargeable_rate + markup
    service_charge = _decimal(package.get("service_charge"), rule.service_charge)
    processing_fee = _decimal(
        package.get("processing_fee"),
        rule.processing_fee_percentage / _HUNDRED * base_amount,
    )
    gst = _decimal(
        package.get("gst"),
        rule.gst_percentage
        / _HUNDRED
        * (base_amount + service_charge + processing_fee),
    )

    package.setdefault("room_rate", _money(chargeable_rate))
    package.setdefault("client_commission", 0)
    package["markup"] = _money(markup)
    package["base_amount"] = _money(base_amount)
    package["service_charge"] = _money(service_charge)
    package["processing_fee"] = _money(processing_fee)
    package["gst"] = _money(gst)
    return package
