"""Versioned API router."""

from fastapi import APIRouter

from . import auth, bookings, documents, health, search

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(search.router, tags=["search"])
router.include_router(bookings.router, tags=["bookings"])
router.include_router(documents.router, tags=["documents"])

__all__ = ["router"]
