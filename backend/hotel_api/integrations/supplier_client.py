"""Typed client for the upstream hotel supplier API."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class SupplierClientError(RuntimeError):
    """Raised when the supplier call fails or returns an unusable body."""


class SuggestionKind(str, enum.Enum):
    """Result groups returned by supplier autosuggest."""

    CITY = "city"
    HOTEL = "hotel"
    POI = "poi"


@dataclass(slots=True)
class SuggestionGroup:
    """One tagged group of autosuggest results."""

    kind: SuggestionKind
    items: list[dict[str, Any]]


@dataclass(slots=True)
class AutosuggestResult:
    """Decoded autosuggest response."""

    transaction_identifier: str | None
    groups: list[SuggestionGroup] = field(default_factory=list)


class SupplierClient:
    """Wrapper around the supplier HTTP API.

    Every operation is a single request/response; nothing is retried here.
    """

    def __init__(
        self,
        base_url: str,
        *,
        api_key: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        if api_key:
            headers["x-api-key"] = api_key
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            response = await self._client.post(path, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise SupplierClientError(
                f"Supplier {path} returned {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise SupplierClientError(f"Supplier {path} request failed") from exc
        try:
            body = response.json()
        except ValueError as exc:
            raise SupplierClientError(f"Supplier {path} returned invalid JSON") from exc
        if not isinstance(body, dict):
            raise SupplierClientError(f"Supplier {path} returned an unexpected body")
        return body

    async def autosuggest(self, term: str, *, locale: str = "en-US") -> AutosuggestResult:
        body = await self._post(
            "/autosuggest", {"autosuggest": {"query": term, "locale": locale}}
        )
        data = body.get("data") or {}
        transaction_identifier = (
            body.get("transaction_identifier") or data.get("transaction_identifier")
        )
        groups: list[SuggestionGroup] = []
        for kind in SuggestionKind:
            section = data.get(kind.value)
            if not section:
                continue
            results = section.get("results") or []
            groups.append(
                SuggestionGroup(kind=kind, items=[dict(item) for item in results])
            )
        return AutosuggestResult(
            transaction_identifier=transaction_identifier, groups=groups
        )

    async def search_hotels(self, search: dict[str, Any]) -> dict[str, Any]:
        return await self._post("/search", {"search": search})

    async def search_packages(self, search: dict[str, Any]) -> dict[str, Any]:
        return await self._post("/search", {"search": search})

    async def get_booking_policy(
        self,
        transaction_identifier: str,
        search: dict[str, Any],
        package: dict[str, Any],
    ) -> dict[str, Any]:
        return await self._post(
            "/bookingpolicy",
            {
                "bookingpolicy": {
                    "transaction_identifier": transaction_identifier,
                    "search": search,
                    "package": package,
                }
            },
        )

    async def prebook(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._post("/prebook", {"prebook": payload})

    async def cancel(self, booking_id: str) -> dict[str, Any]:
        return await self._post("/cancel", {"cancel": {"booking_id": booking_id}})
