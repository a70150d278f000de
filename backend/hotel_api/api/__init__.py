"""HTTP routers for the hotel booking API."""

from fastapi import APIRouter

from hotel_api.api.v1 import router as v1_router
from hotel_api.core.config import get_settings

api_router = APIRouter()
api_router.include_router(v1_router, prefix=get_settings().api_v1_prefix)

__all__ = ["api_router"]
