"""Autosuggest, hotel search and package search endpoints."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from hotel_api.api import deps
from hotel_api.cache import SearchCache
from hotel_api.core.config import Settings
from hotel_api.integrations import SupplierClient
from hotel_api.schemas.search import (
    AutosuggestRequest,
    HotelSearchRequest,
    PackageSearchRequest,
)
from hotel_api.services import search_service

router = APIRouter()


@router.post("/autosuggest", summary="Suggest destinations and hotels")
async def autosuggest(
    payload: AutosuggestRequest,
    cache: Annotated[SearchCache, Depends(deps.get_search_cache)],
    supplier: Annotated[SupplierClient, Depends(deps.get_supplier)],
    settings: Annotated[Settings, Depends(deps.get_app_settings)],
) -> dict[str, Any]:
    return await search_service.autosuggest(
        payload, cache=cache, supplier=supplier, settings=settings
    )


@router.post("/search", summary="Search hotels in an area")
async def search_hotels(
    payload: HotelSearchRequest,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    cache: Annotated[SearchCache, Depends(deps.get_search_cache)],
    supplier: Annotated[SupplierClient, Depends(deps.get_supplier)],
    settings: Annotated[Settings, Depends(deps.get_app_settings)],
) -> dict[str, Any]:
    return await search_service.search_hotels(
        session, payload, cache=cache, supplier=supplier, settings=settings
    )


@router.post("/searchpackages", summary="List priced packages for one hotel")
async def search_packages(
    payload: PackageSearchRequest,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    supplier: Annotated[SupplierClient, Depends(deps.get_supplier)],
    settings: Annotated[Settings, Depends(deps.get_app_settings)],
) -> dict[str, Any]:
    return await search_service.search_packages(
        session, payload, supplier=supplier, settings=settings
    )
