"""Pricing engine for prebook totals and cancellation refunds.

Every monetary intermediate is rounded up to a whole currency unit on its
own before it is combined with anything else.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from decimal import ROUND_CEILING, Decimal, InvalidOperation
from typing import Any, Mapping

from hotel_api.core.errors import ConfigurationError, RequestValidationFailed

CHARGE_TYPES = ("fixed", "percentage")
_HUNDRED = Decimal("100")


def _to_decimal(value: Any, *, field: str) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise RequestValidationFailed(f"Invalid numeric value for {field}") from exc


def _ceil(value: Decimal) -> int:
    return int(value.to_integral_value(rounding=ROUND_CEILING))


def _plain(value: Decimal) -> int | float:
    return int(value) if value == value.to_integral_value() else float(value)


@dataclass(slots=True, frozen=True)
class Coupon:
    """Coupon descriptor supplied by the client at prebook."""

    type: str = "fixed"
    value: Decimal = Decimal("0")

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any] | None) -> "Coupon":
        if not payload:
            return cls()
        coupon_type = str(payload.get("type") or "fixed")
        if coupon_type not in CHARGE_TYPES:
            raise RequestValidationFailed("Coupon type must be fixed or percentage")
        return cls(type=coupon_type, value=_to_decimal(payload.get("value"), field="coupon.value"))


@dataclass(slots=True, frozen=True)
class PricingBreakdown:
    """Derived prices persisted with a transaction."""

    base_amount_discount_included: int
    base_amount_discount_excluded: int
    coupon_discount: int
    client_discount: int
    service_charges: int | float
    processing_fee: int | float
    gst: int | float
    total_chargeable_amount: int
    actual_room_rate: int | float
    client_commission: int | float
    base_amount_markup_excluded: int
    markup_applied: int
    currency: str | None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True, frozen=True)
class RefundQuote:
    """Penalty and refund computed for a cancelled booking."""

    base_amount: Decimal
    cancellation_charge: Decimal
    penalty_percentage: Decimal
    penalty_value: Decimal
    refund_value: Decimal
    currency: str | None

    def penalty(self) -> dict[str, Any]:
        return {"value": _plain(self.penalty_value), "currency": self.currency}

    def refund(self) -> dict[str, Any]:
        return {"value": _plain(self.refund_value), "currency": self.currency}

    def charge(self) -> int | float:
        return _plain(self.cancellation_charge)

    def percentage(self) -> int | float:
        return _plain(self.penalty_percentage)


def compute_pricing(
    package: Mapping[str, Any], coupon: Coupon | None = None
) -> PricingBreakdown:
    """Produce the prebook breakdown for a marked-up package."""

    coupon = coupon or Coupon()
    base_amount = _to_decimal(package.get("base_amount"), field="base_amount")
    service_charge = _to_decimal(package.get("service_charge"), field="service_charge")
    processing_fee = _to_decimal(package.get("processing_fee"), field="processing_fee")
    gst = _to_decimal(package.get("gst"), field="gst")
    guest_discount = _to_decimal(
        package.get("guest_discount_percentage"), field="guest_discount_percentage"
    )

    base_included = _ceil(base_amount)
    client_discount = _ceil(guest_discount / _HUNDRED * base_amount) if guest_discount else 0
    base_excluded = base_included - client_discount
    if coupon.type == "fixed":
        coupon_discount = _ceil(coupon.value)
    else:
        coupon_discount = _ceil(coupon.value / _HUNDRED * base_included)

    total = _ceil(
        Decimal(base_included)
        - coupon_discount
        + service_charge
        + processing_fee
        + gst
    )

    actual_room_rate = _to_decimal(package.get("room_rate"), field="room_rate")
    client_commission = _to_decimal(
        package.get("client_commission"), field="client_commission"
    )
    markup_excluded = _ceil(actual_room_rate + client_commission)
    markup_applied = _ceil(base_amount - markup_excluded)

    return PricingBreakdown(
        base_amount_discount_included=base_included,
        base_amount_discount_excluded=base_excluded,
        coupon_discount=coupon_discount,
        client_discount=client_discount,
        service_charges=_plain(service_charge),
        processing_fee=_plain(processing_fee),
        gst=_plain(gst),
        total_chargeable_amount=total,
        actual_room_rate=_plain(actual_room_rate),
        client_commission=_plain(client_commission),
        base_amount_markup_excluded=markup_excluded,
        markup_applied=markup_applied,
        currency=package.get("chargeable_rate_currency"),
    )


def validate_cancellation_charge(config: Mapping[str, Any] | None) -> tuple[str, Decimal]:
    """Return ``(type, value)`` or raise when the admin config is unusable."""

    if not config:
        raise ConfigurationError("Unable to cancel the hotel booking.")
    charge_type = config.get("type")
    try:
        value = Decimal(str(config.get("value")))
    except (InvalidOperation, ValueError) as exc:
        raise ConfigurationError("Unable to cancel the hotel booking.") from exc
    if charge_type not in CHARGE_TYPES or value < 0 or not value.is_finite():
        raise ConfigurationError("Unable to cancel the hotel booking.")
    return charge_type, value


def compute_refund(
    *,
    base_amount: Any,
    cancellation_charge: Mapping[str, Any] | None,
    api_penalty_percentage: Any,
    currency: str | None,
) -> RefundQuote:
    """Work out penalty and refund for a cancellation.

    The refund never drops below zero.
    """

    charge_type, charge_value = validate_cancellation_charge(cancellation_charge)
    base = _to_decimal(base_amount, field="base_amount")
    penalty_percentage = _to_decimal(
        api_penalty_percentage, field="api_penalty_percentage"
    )

    if charge_type == "percentage":
        charge = charge_value / _HUNDRED * base
    else:
        charge = charge_value

    penalty_value = penalty_percentage / _HUNDRED * base + charge
    refund_value = max(Decimal("0"), base - penalty_value)

    return RefundQuote(
        base_amount=base,
        cancellation_charge=charge,
        penalty_percentage=penalty_percentage,
        penalty_value=penalty_value,
        refund_value=refund_value,
        currency=currency,
    )
