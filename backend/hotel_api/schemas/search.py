"""Pydantic schemas for autosuggest, hotel and package search."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class RoomDetail(_Payload):
    """Occupancy of one requested room."""

    adult_count: int = Field(ge=0)
    child_count: int | None = 0
    children: list[dict[str, Any]] | None = None


class SearchArea(_Payload):
    id: str | int | None = None
    type: str
    name: str | None = None


class PriceRange(_Payload):
    min: float = 0
    max: float = 0


class HotelFilters(_Payload):
    """Optional hotel result filters; empty lists mean no filtering."""

    room_type: list[str] = Field(default_factory=list, alias="roomType")
    food_type: list[str] = Field(default_factory=list, alias="foodType")
    refundable: list[bool] = Field(default_factory=list)
    star_rating: list[float] = Field(default_factory=list, alias="starRating")
    price: PriceRange | None = None


class AutosuggestRequest(_Payload):
    query: str | None = None
    page: int | None = None
    per_page: int | None = Field(default=None, alias="perPage")
    current_items_count: int | None = Field(default=None, alias="currentItemsCount")


class HotelSearchRequest(_Payload):
    details: list[RoomDetail]
    area: SearchArea
    checkindate: str
    checkoutdate: str
    transaction_identifier: str | None = None
    filters: HotelFilters | None = None
    page: int | None = None
    per_page: int | None = Field(default=None, alias="perPage")
    current_hotels_count: int | None = Field(default=None, alias="currentHotelsCount")


class PackageSearchRequest(_Payload):
    hotel_id: str = Field(alias="hotelId", min_length=1)
    checkindate: str = Field(min_length=1)
    checkoutdate: str = Field(min_length=1)
    details: list[RoomDetail]
    transaction_identifier: str | None = None
    reference_id: str | None = Field(default=None, alias="referenceId")
