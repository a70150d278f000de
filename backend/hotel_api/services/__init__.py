"""Service layer exports."""
from hotel_api.services import (
    booking_service,
    document_service,
    markup_service,
    notification_service,
    pricing_service,
    search_service,
    user_service,
)

__all__ = [
    "booking_service",
    "document_service",
    "markup_service",
    "notification_service",
    "pricing_service",
    "search_service",
    "user_service",
]
