"""Integration shortcuts."""

from .sms_client import SmsClient, SmsClientError
from .supplier_client import (
    AutosuggestResult,
    SuggestionGroup,
    SuggestionKind,
    SupplierClient,
    SupplierClientError,
)

__all__ = [
    "AutosuggestResult",
    "SmsClient",
    "SmsClientError",
    "SuggestionGroup",
    "SuggestionKind",
    "SupplierClient",
    "SupplierClientError",
]
