"""Service-level exceptions translated into HTTP responses by the API layer."""

from __future__ import annotations

from fastapi import status


class ServiceError(Exception):
    """Base class for failures that map onto a client-visible response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Unable to process the request"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class RequestValidationFailed(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed!"


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class NoValidPackagesError(NotFoundError):
    default_message = "No valid packages available for this hotel"


class AuthorizationError(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Not Authorized"


class InvalidPageError(ServiceError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Invalid page no"


class DocumentGenerationError(ServiceError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Cannot generate document for the given transaction"


class UpstreamError(ServiceError):
    """The hotel supplier failed or answered with an unusable payload."""

    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Hotel supplier is unavailable, please try again."


class PersistenceError(ServiceError):
    default_message = "Cannot book selected hotel"


class ConfigurationError(ServiceError):
    default_message = "Service is not configured"


class MarkupError(Exception):
    """Raised when markup cannot be applied to a supplier package."""


__all__ = [
    "AuthorizationError",
    "ConfigurationError",
    "DocumentGenerationError",
    "InvalidPageError",
    "MarkupError",
    "NoValidPackagesError",
    "NotFoundError",
    "PersistenceError",
    "RequestValidationFailed",
    "ServiceError",
    "UpstreamError",
]
