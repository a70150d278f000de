"""Pydantic schemas for the booking lifecycle endpoints."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class BookingPolicyRequest(_Payload):
    transaction_id: str = Field(min_length=1)
    search: dict[str, Any]
    booking_key: str = Field(alias="bookingKey", min_length=1)
    hotel_id: str = Field(alias="hotelId", min_length=1)


class ContactDetail(_Payload):
    """Person booking the stay; also used to create anonymous accounts."""

    name: str = Field(min_length=1)
    last_name: str | None = None
    mobile: str = Field(min_length=1)
    email: str | None = None

    @field_validator("mobile", mode="before")
    @classmethod
    def _mobile_as_text(cls, value: Any) -> Any:
        if isinstance(value, int):
            return str(value)
        return value


class RoomGuest(_Payload):
    firstname: str
    lastname: str | None = None
    mobile: str | None = None
    nationality: str | None = None

    @field_validator("mobile", mode="before")
    @classmethod
    def _mobile_as_text(cls, value: Any) -> Any:
        if isinstance(value, int):
            return str(value)
        return value


class GuestEntry(_Payload):
    room_guest: list[RoomGuest] = Field(min_length=1)


class CouponPayload(_Payload):
    type: Literal["fixed", "percentage"] = "fixed"
    value: float = Field(default=0, ge=0)


class PrebookRequest(_Payload):
    booking_policy_id: str = Field(min_length=1)
    transaction_id: str = Field(min_length=1)
    contact_detail: ContactDetail = Field(alias="contactDetail")
    coupon: CouponPayload | None = None
    guest: list[GuestEntry] | None = None


class CancelUser(_Payload):
    id: str = Field(alias="_id")


class CancelRequest(_Payload):
    user: CancelUser
    transaction_id: str = Field(alias="transactionId", min_length=1)


class LoginRequest(_Payload):
    mobile: str
    password: str

    @field_validator("mobile", mode="before")
    @classmethod
    def _mobile_as_text(cls, value: Any) -> Any:
        if isinstance(value, int):
            return str(value)
        return value


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
