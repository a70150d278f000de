"""ORM models package export."""

from hotel_api.models.app_config import AppConfig
from hotel_api.models.booking_policy import BookingPolicy
from hotel_api.models.hotel import Hotel, MetaSearchVendor
from hotel_api.models.transaction import Transaction, TransactionStatus
from hotel_api.models.user import User

__all__ = [
    "AppConfig",
    "BookingPolicy",
    "Hotel",
    "MetaSearchVendor",
    "Transaction",
    "TransactionStatus",
    "User",
]
