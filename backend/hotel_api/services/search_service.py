"""Autosuggest, hotel search and package search orchestration."""

from __future__ import annotations

import asyncio
import copy
import logging
import math
import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hotel_api.cache import SearchCache, autosuggest_key, hotel_search_key
from hotel_api.core.config import Settings
from hotel_api.core.errors import (
    InvalidPageError,
    MarkupError,
    NoValidPackagesError,
    NotFoundError,
    PersistenceError,
    RequestValidationFailed,
    UpstreamError,
)
from hotel_api.integrations import (
    SuggestionKind,
    SupplierClient,
    SupplierClientError,
)
from hotel_api.models import Hotel, MetaSearchVendor
from hotel_api.schemas.search import (
    AutosuggestRequest,
    HotelFilters,
    HotelSearchRequest,
    PackageSearchRequest,
    RoomDetail,
)
from hotel_api.services import markup_service

logger = logging.getLogger(__name__)

MIN_PER_PAGE = 10
MAX_PER_PAGE = 50
STATUS_COMPLETE = "complete"
STATUS_IN_PROGRESS = "in-progress"


@dataclass(slots=True, frozen=True)
class PageRequest:
    page: int
    per_page: int
    current_count: int


@dataclass(slots=True, frozen=True)
class PageWindow:
    items: list[Any]
    next_count: int
    total_count: int
    total_pages: int
    status: str


def normalize_page(
    page: int | None, per_page: int | None, current_count: int | None
) -> PageRequest:
    """Apply defaults and bounds to client pagination input."""
    if per_page is not None and per_page > MAX_PER_PAGE:
        raise RequestValidationFailed(
            f"perPage should not be greater than {MAX_PER_PAGE}"
        )
    if not page or page < 1:
        page = 1
    if not per_page or per_page < MIN_PER_PAGE:
        per_page = MIN_PER_PAGE
    if not current_count or current_count < 0:
        current_count = 0
    return PageRequest(page=page, per_page=per_page, current_count=current_count)


def paginate(items: Sequence[Any], request: PageRequest) -> PageWindow | None:
    """Cut the next window out of the full result list.

    Returns ``None`` when the requested page lies beyond the last page.
    """
    total = len(items)
    total_pages = math.ceil(total / request.per_page)
    if request.page > total_pages:
        return None
    status = STATUS_COMPLETE if request.page == total_pages else STATUS_IN_PROGRESS
    lower = request.current_count
    upper = min(lower + request.per_page, total + 1)
    return PageWindow(
        items=list(items[lower:upper]),
        next_count=min(request.page * request.per_page, total),
        total_count=total,
        total_pages=total_pages,
        status=status,
    )


def limit_region_ids(region_ids: Any, max_count: int = MAX_PER_PAGE) -> Any:
    """Cap a comma separated id list to what the supplier accepts."""
    if not region_ids or not isinstance(region_ids, str):
        return region_ids
    ids = region_ids.split(",")
    if len(ids) <= max_count:
        return region_ids
    logger.info("Region ids limited from %d to %d", len(ids), max_count)
    return ",".join(ids[:max_count])


def build_room_details(
    details: Sequence[RoomDetail],
) -> tuple[tuple[dict[str, Any], ...], int, int]:
    """Return supplier room entries plus adult and child totals.

    Rooms without children drop ``child_count`` and ``children``.
    """
    rooms: list[dict[str, Any]] = []
    total_adult = 0
    total_child = 0
    for detail in details:
        room: dict[str, Any] = {"adult_count": detail.adult_count}
        total_adult += detail.adult_count
        if detail.child_count and detail.child_count > 0:
            room["child_count"] = detail.child_count
            room["children"] = [dict(child) for child in detail.children or []]
            total_child += detail.child_count
        rooms.append(room)
    return tuple(rooms), total_adult, total_child


def build_search(
    *,
    search_type: str,
    search_id: Any,
    name: str | None,
    check_in_date: str,
    check_out_date: str,
    details: Sequence[RoomDetail],
    transaction_identifier: str | None,
    settings: Settings,
) -> dict[str, Any]:
    rooms, total_adult, total_child = build_room_details(details)
    search: dict[str, Any] = {
        "source_market": settings.supplier_source_market,
        "type": search_type,
        "id": limit_region_ids(search_id, settings.region_id_limit),
        "name": name,
        "check_in_date": check_in_date,
        "check_out_date": check_out_date,
        "total_adult_count": str(total_adult),
        "total_child_count": str(total_child),
        "total_room_count": str(len(rooms)),
        "details": list(rooms),
    }
    if transaction_identifier and transaction_identifier != "undefined":
        search["transaction_identifier"] = transaction_identifier
    return search


def _empty_suggestions(request: PageRequest) -> dict[str, Any]:
    return {
        "data": [],
        "status": STATUS_COMPLETE,
        "currentItemsCount": 0,
        "totalItemsCount": 0,
        "page": request.page,
        "perPage": request.per_page,
        "totalPages": 0,
    }


def _display_name(kind: SuggestionKind, item: Mapping[str, Any]) -> str:
    if kind is SuggestionKind.HOTEL:
        return f"{item.get('name')}"
    return f"{item.get('name')} | ({item.get('hotelCount')})"


async def autosuggest(
    payload: AutosuggestRequest,
    *,
    cache: SearchCache,
    supplier: SupplierClient,
    settings: Settings,
) -> dict[str, Any]:
    """Suggest cities, hotels and points of interest for a search term."""
    request = normalize_page(payload.page, payload.per_page, payload.current_items_count)
    term = payload.query
    if not term or len(term) < 3:
        return _empty_suggestions(request)

    key = autosuggest_key(term)
    suggestions = await cache.get_json(key)
    if isinstance(suggestions, list):
        logger.debug("autosuggest %r served from cache", term)
    else:
        try:
            result = await supplier.autosuggest(term, locale=settings.supplier_locale)
        except SupplierClientError as exc:
            logger.exception("autosuggest %r failed upstream", term)
            await cache.delete(key)
            raise UpstreamError() from exc
        logger.debug("autosuggest %r served from supplier", term)
        suggestions = []
        for group in result.groups:
            for item in group.items:
                item["transaction_identifier"] = result.transaction_identifier
                item["displayName"] = _display_name(group.kind, item)
                if group.kind is SuggestionKind.CITY:
                    item["id"] = limit_region_ids(item.get("id"), settings.region_id_limit)
                suggestions.append(item)
        if suggestions:
            await cache.set_json(key, suggestions, settings.autosuggest_cache_ttl)

    window = paginate(suggestions, request)
    if window is None:
        return _empty_suggestions(request)
    return {
        "data": window.items,
        "status": window.status,
        "currentItemsCount": window.next_count,
        "totalItemsCount": window.total_count,
        "page": request.page,
        "perPage": request.per_page,
        "totalPages": window.total_pages,
    }


def _has_packages(hotel: Mapping[str, Any]) -> bool:
    packages = (hotel.get("rates") or {}).get("packages")
    return isinstance(packages, list) and len(packages) > 0


def _star_rating(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        logger.warning("Ignoring unparseable star rating %r", value)
        return 0.0


def _hotel_row(hotel: Mapping[str, Any], region: Any) -> Hotel:
    payload = {key: value for key, value in hotel.items() if key != "rates"}
    return Hotel(
        supplier_hotel_id=str(hotel.get("id")),
        name=str(hotel.get("name") or ""),
        original_name=hotel.get("originalName") or hotel.get("name"),
        star_rating=_star_rating(hotel.get("starRating")),
        region=region,
        rates=copy.deepcopy(hotel.get("rates") or {}),
        payload=payload,
    )


def hotel_matches(hotel: Mapping[str, Any], filters: HotelFilters) -> bool:
    """Check a priced hotel against user filters.

    Room and food type need one matching package; refundability and price
    look only at the first package.
    """
    packages = (hotel.get("rates") or {}).get("packages") or []
    if not packages:
        return False
    if filters.room_type:
        if not any(
            (pkg.get("room_details") or {}).get("room_type") in filters.room_type
            for pkg in packages
        ):
            return False
    if filters.food_type:
        if not any(
            (pkg.get("room_details") or {}).get("food") in filters.food_type
            for pkg in packages
        ):
            return False
    if filters.refundable:
        non_refundable = (packages[0].get("room_details") or {}).get("non_refundable")
        if non_refundable is None:
            non_refundable = True
        if (not non_refundable) not in filters.refundable:
            return False
    if filters.star_rating:
        if _star_rating(hotel.get("starRating")) not in filters.star_rating:
            return False
    price = filters.price
    if price is not None and price.min >= 0 and price.max > 0:
        base_amount = packages[0].get("base_amount") or 0
        if not price.min <= base_amount <= price.max:
            return False
    return True


async def _price_first_package(
    hotel: dict[str, Any], rule: markup_service.MarkupRule
) -> dict[str, Any] | None:
    try:
        markup_service.add_markup(hotel["rates"]["packages"][0], rule)
    except MarkupError:
        logger.warning(
            "Dropping hotel %s: markup failed", hotel.get("name"), exc_info=True
        )
        return None
    return hotel


async def search_hotels(
    session: AsyncSession,
    payload: HotelSearchRequest,
    *,
    cache: SearchCache,
    supplier: SupplierClient,
    settings: Settings,
) -> dict[str, Any]:
    """Search hotels in an area and return one priced, filtered page."""
    request = normalize_page(
        payload.page, payload.per_page, payload.current_hotels_count
    )
    search = build_search(
        search_type=payload.area.type,
        search_id=payload.area.id,
        name=payload.area.name,
        check_in_date=payload.checkindate,
        check_out_date=payload.checkoutdate,
        details=payload.details,
        transaction_identifier=payload.transaction_identifier,
        settings=settings,
    )

    key = hotel_search_key(search)
    fetched = False
    data = await cache.get_json(key)
    if isinstance(data, dict):
        logger.debug("hotel search served from cache: %s", key)
    else:
        try:
            data = await supplier.search_hotels(search)
        except SupplierClientError as exc:
            logger.exception("hotel search failed upstream: %s", key)
            await cache.delete(key)
            raise UpstreamError() from exc
        fetched = True
        result = data.get("data") or {}
        if (result.get("totalHotelsCount") or 0) >= 1:
            await cache.set_json(key, data, settings.hotel_search_cache_ttl)

    try:
        return await _hotel_search_page(session, payload, data, request)
    except Exception:
        if fetched:
            logger.warning("Dropping cached hotel search after failure: %s", key)
            await cache.delete(key)
        raise


async def _hotel_search_page(
    session: AsyncSession,
    payload: HotelSearchRequest,
    data: Mapping[str, Any],
    request: PageRequest,
) -> dict[str, Any]:
    result = data.get("data")
    if not result:
        raise NotFoundError("No Hotels Found")
    hotels_list = list(result.get("hotels") or [])
    if not hotels_list:
        raise NotFoundError("No hotels found")

    window = paginate(hotels_list, request)
    if window is None:
        raise InvalidPageError()

    selected = [copy.deepcopy(hotel) for hotel in window.items if _has_packages(hotel)]
    dropped = len(window.items) - len(selected)
    if dropped:
        logger.info("Filtered %d hotels with empty packages", dropped)

    rows = [_hotel_row(hotel, result.get("region")) for hotel in selected]
    try:
        session.add_all(rows)
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.exception("Persisting %d searched hotels failed", len(rows))
        raise PersistenceError("Error in generating response!") from exc
    for hotel, row in zip(selected, rows):
        hotel["hotelId"] = str(row.id)

    rule = await markup_service.load_markup_rule(session)
    priced = await asyncio.gather(
        *(_price_first_package(hotel, rule) for hotel in selected)
    )
    valid_hotels = [hotel for hotel in priced if hotel is not None]

    min_price: float = 0
    max_price: float = 1
    for hotel in valid_hotels:
        base_amount = hotel["rates"]["packages"][0]["base_amount"]
        min_price = min(min_price, base_amount)
        max_price = max(max_price, base_amount)

    filters = payload.filters or HotelFilters()
    filtered = [hotel for hotel in valid_hotels if hotel_matches(hotel, filters)]

    return {
        "data": {
            "search": result.get("search"),
            "region": result.get("region"),
            "hotels": filtered,
            "price": {
                "minPrice": math.floor(min_price),
                "maxPrice": math.ceil(max_price),
            },
            "currentHotelsCount": request.current_count + len(filtered),
            "totalHotelsCount": window.total_count,
            "page": request.page,
            "perPage": request.per_page,
            "totalPages": window.total_pages,
            "status": window.status,
            "transaction_identifier": data.get("transaction_identifier"),
        }
    }


async def get_hotel(session: AsyncSession, hotel_id: str | uuid.UUID) -> Hotel:
    """Load a stored hotel or raise ``NotFoundError``."""
    try:
        key = hotel_id if isinstance(hotel_id, uuid.UUID) else uuid.UUID(str(hotel_id))
    except ValueError as exc:
        raise NotFoundError("Hotel not found!!") from exc
    hotel = await session.get(Hotel, key)
    if hotel is None:
        raise NotFoundError("Hotel not found!!")
    return hotel


async def _find_meta_search_vendor(
    session: AsyncSession, reference_id: str | None
) -> MetaSearchVendor | None:
    if not reference_id:
        return None
    try:
        result = await session.execute(
            select(MetaSearchVendor).where(MetaSearchVendor.reference_id == reference_id)
        )
    except SQLAlchemyError:
        logger.exception("Meta search lookup failed for reference %s", reference_id)
        return None
    return result.scalar_one_or_none()


async def search_packages(
    session: AsyncSession,
    payload: PackageSearchRequest,
    *,
    supplier: SupplierClient,
    settings: Settings,
) -> dict[str, Any]:
    """Fetch and price every package of a previously found hotel."""
    hotel = await get_hotel(session, payload.hotel_id)
    search = build_search(
        search_type="hotel",
        search_id=hotel.supplier_hotel_id,
        name=hotel.name,
        check_in_date=payload.checkindate,
        check_out_date=payload.checkoutdate,
        details=payload.details,
        transaction_identifier=payload.transaction_identifier,
        settings=settings,
    )
    try:
        data = await supplier.search_packages(search)
    except SupplierClientError as exc:
        logger.exception("package search failed upstream for hotel %s", hotel.id)
        raise UpstreamError() from exc

    result = data.get("data")
    if not result:
        raise NotFoundError("Hotel not Found")
    if (result.get("totalPackagesCount") or 0) < 1 or not result.get("hotels"):
        raise NotFoundError("Hotel cannot be found")

    raw_hotel = result["hotels"][0]
    if not _has_packages(raw_hotel):
        raise NotFoundError("No packages available for this hotel")

    selected = copy.deepcopy(raw_hotel)
    rule = await markup_service.load_markup_rule(session)
    valid_packages = []
    for package in selected["rates"]["packages"]:
        try:
            valid_packages.append(markup_service.add_markup(package, rule))
        except MarkupError:
            logger.warning(
                "Dropping package %s of hotel %s: markup failed",
                package.get("booking_key") if isinstance(package, dict) else None,
                hotel.id,
                exc_info=True,
            )
    if not valid_packages:
        raise NoValidPackagesError()
    selected["rates"]["packages"] = valid_packages

    vendor = await _find_meta_search_vendor(session, payload.reference_id)
    hotel.meta_search_vendor_id = vendor.id if vendor else None
    rates = dict(hotel.rates or {})
    rates["packages"] = copy.deepcopy(raw_hotel["rates"]["packages"])
    hotel.rates = rates
    try:
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.exception("Updating packages of hotel %s failed", hotel.id)
        raise NotFoundError("Hotel not found!!!!") from exc

    selected["hotelId"] = str(hotel.id)
    return {
        "data": {
            "search": result.get("search"),
            "hotel": selected,
            "currentPackagesCount": result.get("currentPackagesCount"),
            "totalPackagesCount": result.get("totalPackagesCount"),
            "page": result.get("page"),
            "perPage": result.get("perPage"),
            "totalPages": result.get("totalPages"),
            "status": result.get("status"),
            "transaction_identifier": data.get("transaction_identifier"),
        }
    }
