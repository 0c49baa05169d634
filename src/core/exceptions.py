"""
Domain exceptions for the storefront client.

Provides specific exception types for different error scenarios.
Transport failures never leave the endpoint session; validation errors
(local and server-side) are carried to the caller inside outcomes.
"""

from typing import Any


class StorefrontError(Exception):
    """Base exception for all storefront client errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for display or logging."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Validation Exceptions
class ValidationError(StorefrontError):
    """Caller input failed validation before any network attempt."""

    def __init__(self, field_errors: dict[str, list[str]], code: str = "VALIDATION_ERROR"):
        summary = "; ".join(
            f"{field}: {', '.join(messages)}" for field, messages in field_errors.items()
        )
        super().__init__(
            f"Validation failed: {summary}",
            code=code,
            details={"field_errors": field_errors},
        )
        self.field_errors = field_errors

    @classmethod
    def single(cls, field: str, message: str) -> "ValidationError":
        return cls({field: [message]})


class CartError(ValidationError):
    """Sale cart rule violated (duplicate line, bad quantity, low stock)."""

    def __init__(self, field: str, message: str):
        super().__init__({field: [message]}, code="CART_ERROR")


class ServerValidationError(StorefrontError):
    """API rejected a payload with structured field errors."""

    def __init__(
        self,
        field_errors: dict[str, list[str]],
        status_code: int,
        message: str | None = None,
    ):
        super().__init__(
            message or f"Server rejected the payload (HTTP {status_code})",
            code="SERVER_VALIDATION_ERROR",
            details={"field_errors": field_errors, "status_code": status_code},
        )
        self.field_errors = field_errors
        self.status_code = status_code


# Network Exceptions
class TransportError(StorefrontError):
    """Request did not produce a usable 2xx response."""

    def __init__(self, url: str, reason: str, status_code: int | None = None):
        super().__init__(
            f"Request to {url} failed: {reason}",
            code="TRANSPORT_ERROR",
            details={"url": url, "reason": reason, "status_code": status_code},
        )
        self.url = url
        self.reason = reason
        self.status_code = status_code

    @property
    def reached_server(self) -> bool:
        """True when the server answered, just not with a 2xx."""
        return self.status_code is not None


# Session Exceptions
class SessionClosedError(StorefrontError):
    """Operation attempted on a session that has been closed."""

    def __init__(self, operation: str):
        super().__init__(
            f"Endpoint session is closed, cannot {operation}",
            code="SESSION_CLOSED",
            details={"operation": operation},
        )


class ConfigurationError(StorefrontError):
    """Configuration error."""

    pass
