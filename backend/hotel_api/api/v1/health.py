"""Health check endpoints."""

from datetime import UTC, datetime

from fastapi import APIRouter, Request

from hotel_api.core.config import get_settings

router = APIRouter()


@router.get("", summary="Service health status")
async def healthcheck(request: Request) -> dict[str, str]:
    """Return application health metadata and the active cache backend."""
    settings = get_settings()
    search_cache = getattr(request.app.state, "search_cache", None)
    return {
        "status": "ok",
        "service": settings.app_name,
        "timestamp": datetime.now(UTC).isoformat(),
        "environment": settings.app_env,
        "cache": type(search_cache.backend).__name__ if search_cache else "none",
    }
