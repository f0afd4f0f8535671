"""Okta API client library.

Usage:
    from okta_api_client import OktaApiClient, load_settings

    client = OktaApiClient("prod", settings=load_settings())
    users = client.get("users", {"filter": 'status eq "ACTIVE"'})
    if users.status.ok:
        for user in users.data:
            print(user["profile"]["login"])
"""
from ._version import __version__
from .config import Connection, OktaSettings, load_settings
from .core.client import API_PATH, OktaApiClient
from .core.event_log import EventLogger
from .core.exceptions import (
    OktaError,
    ConfigurationError,
    OktaTransportError,
    OktaAPIError,
    BadRequestError,
    UnauthorizedError,
    ForbiddenError,
    NotFoundError,
    MethodNotAllowedError,
    ConflictError,
    PreconditionFailedError,
    UnprocessableError,
    RateLimitError,
    ServerError,
)
from .core.pagination import has_next_page, next_page_url, paginate
from .core.rate_limit import RateLimitGuard, percent_remaining
from .core.response import (
    ErrorEnvelope,
    NormalizedResponse,
    ResponseStatus,
    normalize_headers,
    parse_api_response,
)
from .core.response_log import StatusClass, classify_status, error_for_status
from .core.validators import validate_connection

__all__ = [
    "__version__",

    # Config
    "Connection",
    "OktaSettings",
    "load_settings",

    # Client
    "API_PATH",
    "OktaApiClient",
    "EventLogger",

    # Exceptions
    "OktaError",
    "ConfigurationError",
    "OktaTransportError",
    "OktaAPIError",
    "BadRequestError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "MethodNotAllowedError",
    "ConflictError",
    "PreconditionFailedError",
    "UnprocessableError",
    "RateLimitError",
    "ServerError",

    # Responses
    "ErrorEnvelope",
    "NormalizedResponse",
    "ResponseStatus",
    "normalize_headers",
    "parse_api_response",

    # Pagination and rate limits
    "has_next_page",
    "next_page_url",
    "paginate",
    "RateLimitGuard",
    "percent_remaining",

    # Status mapping
    "StatusClass",
    "classify_status",
    "error_for_status",
    "validate_connection",
]
