"""Zitadel-specific exceptions for error handling."""
from __future__ import annotations
from typing import Any, Optional


class ZitadelError(Exception):
    """Base exception for all Zitadel MCP operations."""
    pass


class ConfigurationError(ZitadelError):
    """Startup configuration is missing or invalid."""
    pass


class ValidationError(ZitadelError, ValueError):
    """Caller-supplied argument failed a precondition.

    Attributes:
        field: Name of the offending argument (may be None for whole-payload checks)
        message: Human-readable reason
    """

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        self.message = message
        super().__init__(message)


class SigningError(ZitadelError):
    """Service account key material cannot be used to sign an assertion."""
    pass


class ZitadelAPIError(ZitadelError):
    """HTTP error from the Zitadel API.

    Attributes:
        status_code: HTTP status code
        message: Error message from response (or "HTTP <status>")
        endpoint: API path that failed
        code: Zitadel/gRPC error code when the body carried one
        details: Structured error details when the body carried them
    """

    def __init__(
        self,
        status_code: int,
        message: str,
        endpoint: str,
        code: Optional[int] = None,
        details: Optional[list[Any]] = None,
    ):
        self.status_code = status_code
        self.message = message
        self.endpoint = endpoint
        self.code = code
        self.details = details or []
        super().__init__(f"[{status_code}] {endpoint}: {message}")


class TokenExchangeError(ZitadelAPIError):
    """The token endpoint rejected the JWT-bearer assertion."""
    pass


def describe_error(error: BaseException) -> str:
    """Map any exception onto the user-facing message relayed to the MCP client.

    404, 409 and 429 get their own wording; every other API status collapses
    into a generic backend error.
    """
    if isinstance(error, ValidationError):
        if error.field:
            return f"Invalid parameter '{error.field}': {error.message}"
        return f"Invalid parameter: {error.message}"

    if isinstance(error, ZitadelAPIError):
        if error.status_code == 404:
            return "Resource not found in Zitadel"
        if error.status_code == 409:
            return f"Conflict: {error.message}"
        if error.status_code == 429:
            return "Rate limit exceeded. Please try again later."
        return f"Zitadel API error: {error.message}"

    return str(error) or "Unknown error occurred"
