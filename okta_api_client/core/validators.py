"""Connection validation helpers."""
from __future__ import annotations
import re
from typing import Any, Mapping, Optional, Union
from urllib.parse import urlparse

from ..config.settings import Connection
from .event_log import EventLogger
from .exceptions import ConfigurationError

TOKEN_LENGTH = 42
_TOKEN_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


def validate_base_url(base_url: Any) -> list[str]:
    """Return the problems with a tenant base URL (empty list if valid)."""
    if not base_url or not isinstance(base_url, str):
        return ["The base url field is required."]
    parsed = urlparse(base_url.strip())
    if parsed.scheme != "https" or not parsed.netloc:
        return ["The base url field must be a valid https URL."]
    return []


def validate_token(token: Any) -> list[str]:
    """Return the problems with an API token (empty list if valid)."""
    if not token or not isinstance(token, str):
        return ["The token field is required."]
    problems = []
    if not _TOKEN_PATTERN.match(token):
        problems.append("The token field must only contain letters, numbers, dashes, and underscores.")
    if len(token) != TOKEN_LENGTH:
        problems.append(f"The token field must be {TOKEN_LENGTH} characters.")
    return problems


def validate_connection(
    connection: Union[Connection, Mapping[str, Any]],
    events: Optional[EventLogger] = None,
) -> Connection:
    """Validate a connection before any request is sent.

    Args:
        connection: Connection or mapping with ``base_url`` and ``token``
            (``url`` is accepted as an alias of ``base_url``)
        events: Logger used to record the validation failure

    Returns:
        Validated connection with the trailing slash removed from base_url

    Raises:
        ConfigurationError: If base_url or token is missing or malformed
    """
    if isinstance(connection, Connection):
        base_url, token, channels = connection.base_url, connection.token, connection.log_channels
    else:
        base_url = connection.get("base_url") or connection.get("url")
        token = connection.get("token")
        channels = connection.get("log_channels")

    errors = validate_base_url(base_url) + validate_token(token)
    if errors:
        (events or EventLogger(channels)).log(
            "okta.api.validate.error",
            "critical",
            "Error",
            method="validate_connection",
            errors={"validation": errors},
        )
        raise ConfigurationError(
            " ".join([
                "Okta API configuration validation error.",
                "(Solution) " + " ".join(errors),
            ]),
            errors=errors,
        )

    kwargs = {"base_url": base_url.strip().rstrip("/"), "token": token}
    if channels:
        kwargs["log_channels"] = tuple(channels)
    return Connection(**kwargs)
