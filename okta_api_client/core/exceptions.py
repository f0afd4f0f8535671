"""Okta-specific exceptions for error handling."""
from __future__ import annotations
from typing import Any, Optional


class OktaError(Exception):
    """Base exception for all Okta API client operations."""
    pass


class ConfigurationError(OktaError, ValueError):
    """Connection or settings validation failed.

    Attributes:
        errors: Every validation problem that was found
    """

    def __init__(self, message: str, errors: Optional[list[str]] = None):
        self.errors = errors or []
        super().__init__(message)


class OktaTransportError(OktaError):
    """Network-level failure (DNS, timeout, connection reset) during a pagination walk.

    Attributes:
        method: Client method that issued the request
        url: Page URL that failed
    """

    def __init__(self, message: str, method: str, url: str):
        self.method = method
        self.url = url
        super().__init__(message)


class OktaAPIError(OktaError):
    """HTTP error status from the Okta API.

    Attributes:
        message: Human readable message (METHOD STATUS URL [errorCode errorSummary])
        status_code: HTTP status code
        method: HTTP method of the failed request
        url: Request URL
        response: NormalizedResponse that triggered the error
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        method: str = "",
        url: str = "",
        response: Any = None,
    ):
        self.message = message
        self.status_code = status_code
        self.method = method
        self.url = url
        self.response = response
        super().__init__(message)


class BadRequestError(OktaAPIError):
    """400 - request payload or query is invalid."""
    pass


class UnauthorizedError(OktaAPIError):
    """401 - API token is missing, invalid or expired."""
    pass


class ForbiddenError(OktaAPIError):
    """403 - token owner lacks the required admin permissions."""
    pass


class NotFoundError(OktaAPIError):
    """404 - resource does not exist."""
    pass


class MethodNotAllowedError(OktaAPIError):
    """405 - endpoint does not support this HTTP method."""
    pass


class ConflictError(OktaAPIError):
    """409 - resource already exists or is in a conflicting state."""
    pass


class PreconditionFailedError(OktaAPIError):
    """412 - precondition on the resource failed."""
    pass


class UnprocessableError(OktaAPIError):
    """422 - payload is well formed but semantically invalid."""
    pass


class RateLimitError(OktaAPIError):
    """429, or quota exhausted according to the rate limit headers."""
    pass


class ServerError(OktaAPIError):
    """500 - Okta returned an internal server error."""
    pass
