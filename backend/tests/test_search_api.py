"""Autosuggest, hotel search and package search endpoints."""

from __future__ import annotations

import uuid

import httpx
import pytest
from sqlalchemy import func, select

from hotel_api.cache import hotel_search_key
from hotel_api.models import Hotel, MetaSearchVendor
from hotel_api.services import search_service
from supplier_fakes import (
    hotel_search_body,
    supplier_hotel,
    supplier_package,
    supplier_search_response,
)

pytestmark = pytest.mark.asyncio


def _autosuggest_response(body):
    return {
        "transaction_identifier": "tid-auto",
        "data": {
            "city": {"results": [{"id": "6053839", "name": "Goa", "hotelCount": 120}]},
            "hotel": {"results": [{"id": "h-1", "name": "Sea View Resort"}]},
            "poi": {"results": [{"id": "p-1", "name": "Baga Beach", "hotelCount": 12}]},
        },
    }


async def test_page_size_over_limit_rejected_before_supplier(app_context) -> None:
    client = app_context["client"]
    supplier = app_context["supplier"]

    response = await client.post(
        "/api/v1/autosuggest", json={"query": "goa", "perPage": 51}
    )
    assert response.status_code == 400
    assert response.json()["message"] == "perPage should not be greater than 50"

    response = await client.post("/api/v1/search", json=hotel_search_body(perPage=51))
    assert response.status_code == 400
    assert supplier.calls == []


async def test_autosuggest_short_query_is_empty(app_context) -> None:
    response = await app_context["client"].post("/api/v1/autosuggest", json={"query": "go"})
    assert response.status_code == 200
    assert response.json() == {
        "data": [],
        "status": "complete",
        "currentItemsCount": 0,
        "totalItemsCount": 0,
        "page": 1,
        "perPage": 10,
        "totalPages": 0,
    }
    assert app_context["supplier"].calls == []


async def test_autosuggest_normalises_and_caches(app_context) -> None:
    client = app_context["client"]
    supplier = app_context["supplier"]
    supplier.responses["/autosuggest"] = _autosuggest_response

    first = await client.post("/api/v1/autosuggest", json={"query": "goa"})
    second = await client.post("/api/v1/autosuggest", json={"query": "goa"})

    assert first.status_code == 200
    payload = first.json()
    assert [item["displayName"] for item in payload["data"]] == [
        "Goa | (120)",
        "Sea View Resort",
        "Baga Beach | (12)",
    ]
    assert {item["transaction_identifier"] for item in payload["data"]} == {"tid-auto"}
    assert payload["status"] == "complete"
    assert payload["totalItemsCount"] == 3
    assert second.json() == payload
    assert len(supplier.calls_to("/autosuggest")) == 1


async def test_autosuggest_page_beyond_results_is_default(app_context) -> None:
    app_context["supplier"].responses["/autosuggest"] = _autosuggest_response

    response = await app_context["client"].post(
        "/api/v1/autosuggest",
        json={"query": "goa", "page": 4, "perPage": 10, "currentItemsCount": 30},
    )

    assert response.status_code == 200
    assert response.json()["data"] == []
    assert response.json()["status"] == "complete"


async def test_autosuggest_upstream_failure(app_context) -> None:
    app_context["supplier"].responses["/autosuggest"] = httpx.Response(503)

    response = await app_context["client"].post("/api/v1/autosuggest", json={"query": "goa"})

    assert response.status_code == 502


async def test_hotel_search_prices_and_persists(app_context) -> None:
    supplier = app_context["supplier"]
    supplier.responses["/search"] = supplier_search_response(
        [
            supplier_hotel("h-1", "Sea View", supplier_package("bk-1", chargeable_rate=1000)),
            supplier_hotel("h-2", "Empty Rooms"),
            supplier_hotel("h-3", "Broken Rates", supplier_package("bk-3", chargeable_rate=None)),
            supplier_hotel("h-4", "Hill Top", supplier_package("bk-4", chargeable_rate=3000)),
        ]
    )

    response = await app_context["client"].post("/api/v1/search", json=hotel_search_body())

    assert response.status_code == 200
    data = response.json()["data"]
    assert [hotel["name"] for hotel in data["hotels"]] == ["Sea View", "Hill Top"]
    assert data["hotels"][0]["rates"]["packages"][0]["base_amount"] == 1100.0
    assert data["price"] == {"minPrice": 0, "maxPrice": 3300}
    assert data["currentHotelsCount"] == 2
    assert data["totalHotelsCount"] == 4
    assert data["status"] == "complete"
    assert data["transaction_identifier"] == "tid-1"

    async with app_context["sessionmaker"]() as session:
        stored = (await session.execute(select(func.count(Hotel.id)))).scalar_one()
        hotel = await session.get(Hotel, uuid.UUID(data["hotels"][0]["hotelId"]))
    # packageless hotels are skipped before storage, markup failures after it
    assert stored == 3
    assert hotel is not None
    assert hotel.supplier_hotel_id == "h-1"


async def test_hotel_search_filters(app_context) -> None:
    app_context["supplier"].responses["/search"] = supplier_search_response(
        [
            supplier_hotel("h-1", "Sea View", supplier_package("bk-1", food="Breakfast")),
            supplier_hotel("h-2", "Hill Top", supplier_package("bk-2", food="Room Only")),
        ]
    )

    response = await app_context["client"].post(
        "/api/v1/search", json=hotel_search_body(filters={"foodType": ["Breakfast"]})
    )

    assert response.status_code == 200
    assert [hotel["name"] for hotel in response.json()["data"]["hotels"]] == ["Sea View"]


async def test_hotel_search_is_cached_for_five_minutes(app_context) -> None:
    client = app_context["client"]
    supplier = app_context["supplier"]
    supplier.responses["/search"] = supplier_search_response(
        [supplier_hotel("h-1", "Sea View", supplier_package())]
    )

    await client.post("/api/v1/search", json=hotel_search_body())
    await client.post("/api/v1/search", json=hotel_search_body(transaction_identifier="tid-2"))
    assert len(supplier.calls_to("/search")) == 1

    app_context["clock"].advance(301)
    await client.post("/api/v1/search", json=hotel_search_body())
    assert len(supplier.calls_to("/search")) == 2


async def test_hotel_search_without_cache_falls_back_to_supplier(app_context) -> None:
    from hotel_api.cache import SearchCache
    from hotel_api.main import app

    class Unreachable:
        async def get(self, key):
            raise ConnectionError("down")

        async def set(self, key, value, ttl_seconds):
            raise ConnectionError("down")

        async def delete(self, key):
            raise ConnectionError("down")

    app.state.search_cache = SearchCache(Unreachable())
    app_context["supplier"].responses["/search"] = supplier_search_response(
        [supplier_hotel("h-1", "Sea View", supplier_package())]
    )

    response = await app_context["client"].post("/api/v1/search", json=hotel_search_body())

    assert response.status_code == 200
    assert len(response.json()["data"]["hotels"]) == 1


async def test_hotel_search_failure_after_fetch_drops_cache_entry(
    app_context, monkeypatch
) -> None:
    client = app_context["client"]
    supplier = app_context["supplier"]
    supplier.responses["/search"] = supplier_search_response(
        [supplier_hotel("h-1", "Sea View", supplier_package())]
    )

    def nameless_row(hotel, region):
        return Hotel(supplier_hotel_id=str(hotel["id"]), name=None, rates={}, payload={})

    monkeypatch.setattr(search_service, "_hotel_row", nameless_row)
    response = await client.post("/api/v1/search", json=hotel_search_body())

    assert response.status_code == 500
    assert response.json()["message"] == "Error in generating response!"
    key = hotel_search_key(supplier.calls_to("/search")[0]["search"])
    assert await app_context["cache"].get_json(key) is None

    monkeypatch.undo()
    response = await client.post("/api/v1/search", json=hotel_search_body())

    assert response.status_code == 200
    assert len(supplier.calls_to("/search")) == 2


async def test_hotel_search_keeps_fractional_star_ratings(app_context) -> None:
    app_context["supplier"].responses["/search"] = supplier_search_response(
        [
            supplier_hotel("h-1", "Sea View", supplier_package("bk-1"), star_rating="4.5"),
            supplier_hotel("h-2", "Hill Top", supplier_package("bk-2"), star_rating=3),
            supplier_hotel("h-3", "Unrated", supplier_package("bk-3"), star_rating="n/a"),
        ]
    )

    response = await app_context["client"].post(
        "/api/v1/search", json=hotel_search_body(filters={"starRating": [4.5]})
    )

    assert response.status_code == 200
    hotels = response.json()["data"]["hotels"]
    assert [hotel["name"] for hotel in hotels] == ["Sea View"]
    async with app_context["sessionmaker"]() as session:
        stored = await session.get(Hotel, uuid.UUID(hotels[0]["hotelId"]))
        unrated = (
            await session.execute(select(Hotel).where(Hotel.supplier_hotel_id == "h-3"))
        ).scalar_one()
    assert stored.star_rating == 4.5
    assert stored.snapshot()["starRating"] == "4.5"
    assert unrated.star_rating == 0


async def test_hotel_search_accepts_null_filters(app_context) -> None:
    app_context["supplier"].responses["/search"] = supplier_search_response(
        [supplier_hotel("h-1", "Sea View", supplier_package())]
    )

    response = await app_context["client"].post(
        "/api/v1/search", json=hotel_search_body(filters=None)
    )

    assert response.status_code == 200
    assert len(response.json()["data"]["hotels"]) == 1


async def test_hotel_search_page_beyond_results(app_context) -> None:
    app_context["supplier"].responses["/search"] = supplier_search_response(
        [supplier_hotel("h-1", "Sea View", supplier_package())]
    )

    response = await app_context["client"].post(
        "/api/v1/search", json=hotel_search_body(page=2, currentHotelsCount=10)
    )

    assert response.status_code == 422
    assert response.json()["message"] == "Invalid page no"


async def test_hotel_search_without_hotels(app_context) -> None:
    supplier = app_context["supplier"]
    supplier.responses["/search"] = supplier_search_response([])

    response = await app_context["client"].post("/api/v1/search", json=hotel_search_body())
    assert response.status_code == 404
    assert response.json()["message"] == "No hotels found"

    supplier.responses["/search"] = {"data": None}
    response = await app_context["client"].post("/api/v1/search", json=hotel_search_body())
    assert response.status_code == 404
    assert response.json()["message"] == "No Hotels Found"


async def test_region_ids_truncated_before_supplier_call(app_context) -> None:
    supplier = app_context["supplier"]
    supplier.responses["/search"] = supplier_search_response(
        [supplier_hotel("h-1", "Sea View", supplier_package())]
    )
    region_ids = ",".join(str(i) for i in range(75))

    await app_context["client"].post(
        "/api/v1/search",
        json=hotel_search_body(area={"id": region_ids, "type": "city", "name": "Goa"}),
    )

    sent = supplier.calls_to("/search")[0]["search"]
    assert len(sent["id"].split(",")) == 50
    assert sent["total_adult_count"] == "2"
    assert sent["total_room_count"] == "1"
    assert sent["details"] == [{"adult_count": 2}]


async def _stored_hotel(app_context, *packages) -> str:
    app_context["supplier"].responses["/search"] = supplier_search_response(
        [supplier_hotel("h-1", "Sea View", *(packages or (supplier_package(),)))]
    )
    response = await app_context["client"].post("/api/v1/search", json=hotel_search_body())
    return response.json()["data"]["hotels"][0]["hotelId"]


async def test_package_search_prices_every_package(app_context) -> None:
    hotel_id = await _stored_hotel(app_context)
    async with app_context["sessionmaker"]() as session:
        session.add(MetaSearchVendor(vendor_name="trivago", reference_id="trv-1"))
        await session.commit()

    packages = [
        supplier_package("bk-1", chargeable_rate=1000),
        supplier_package("bk-2", chargeable_rate="oops"),
        supplier_package("bk-3", chargeable_rate=2000),
    ]
    search_result = supplier_search_response([supplier_hotel("h-1", "Sea View", *packages)])
    search_result["data"]["totalPackagesCount"] = 3
    app_context["supplier"].responses["/search"] = search_result

    response = await app_context["client"].post(
        "/api/v1/searchpackages",
        json={
            "hotelId": hotel_id,
            "checkindate": "2026-12-01",
            "checkoutdate": "2026-12-03",
            "details": [{"adult_count": 2}],
            "transaction_identifier": "tid-1",
            "referenceId": "trv-1",
        },
    )

    assert response.status_code == 200
    hotel = response.json()["data"]["hotel"]
    assert hotel["hotelId"] == hotel_id
    assert [pkg["booking_key"] for pkg in hotel["rates"]["packages"]] == ["bk-1", "bk-3"]
    assert [pkg["base_amount"] for pkg in hotel["rates"]["packages"]] == [1100.0, 2200.0]

    sent = app_context["supplier"].calls_to("/search")[-1]["search"]
    assert sent["type"] == "hotel"
    assert sent["id"] == "h-1"

    async with app_context["sessionmaker"]() as session:
        stored = await session.get(Hotel, uuid.UUID(hotel_id))
        vendor = (await session.execute(select(MetaSearchVendor))).scalar_one()
    assert len(stored.packages) == 3
    assert stored.meta_search_vendor_id == vendor.id


async def test_package_search_without_valid_packages(app_context) -> None:
    hotel_id = await _stored_hotel(app_context)
    search_result = supplier_search_response(
        [supplier_hotel("h-1", "Sea View", supplier_package("bk-9", chargeable_rate=None))]
    )
    search_result["data"]["totalPackagesCount"] = 1
    app_context["supplier"].responses["/search"] = search_result

    response = await app_context["client"].post(
        "/api/v1/searchpackages",
        json={
            "hotelId": hotel_id,
            "checkindate": "2026-12-01",
            "checkoutdate": "2026-12-03",
            "details": [{"adult_count": 2}],
        },
    )

    assert response.status_code == 404
    assert response.json()["message"] == "No valid packages available for this hotel"


async def test_package_search_unknown_hotel(app_context) -> None:
    response = await app_context["client"].post(
        "/api/v1/searchpackages",
        json={
            "hotelId": "00000000-0000-0000-0000-000000000000",
            "checkindate": "2026-12-01",
            "checkoutdate": "2026-12-03",
            "details": [{"adult_count": 2}],
        },
    )
    assert response.status_code == 404
