"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from ..core.event_log import DEFAULT_CHANNEL
from ..core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONNECTIONS = "prod,preview,dev"
REQUEST_TIMEOUT = 30
SECRETS_DIR = Path("/run/secrets")


@dataclass(frozen=True)
class Connection:
    """One Okta tenant: base URL, API token and the log channels for its calls."""
    base_url: str
    token: str = field(repr=False)
    log_channels: tuple[str, ...] = (DEFAULT_CHANNEL,)


@dataclass
class OktaSettings:
    """Client configuration container.

    Attributes:
        default_connection: Connection key used when none is given
        connections: Connection per key (``prod``, ``preview``, ``dev``, ...)
        log_channels: Channels for events not tied to a connection
        exceptions: Raise typed errors for 4xx/5xx responses
        rate_limit_threshold: Sleep when this percent of quota or less remains
        rate_limit_sleep: Seconds to sleep when the threshold is reached
        max_pages: Stop a pagination walk after this many pages (None = unbounded)
        request_timeout: Seconds passed to every HTTP call
    """
    default_connection: str = "prod"
    connections: dict[str, Connection] = field(default_factory=dict)
    log_channels: list[str] = field(default_factory=lambda: [DEFAULT_CHANNEL])
    exceptions: bool = False
    rate_limit_threshold: int = 20
    rate_limit_sleep: float = 10
    max_pages: Optional[int] = None
    request_timeout: float = REQUEST_TIMEOUT

    def connection(self, key: Optional[str] = None) -> Connection:
        """Resolve a connection key to its Connection.

        Raises:
            ConfigurationError: If the key is not configured
        """
        key = key or self.default_connection
        try:
            return self.connections[key]
        except KeyError:
            configured = ", ".join(sorted(self.connections)) or "none"
            raise ConfigurationError(
                f"Okta connection '{key}' is not configured (configured: {configured}). "
                f"(Solution) Set OKTA_{key.upper()}_BASE_URL and OKTA_{key.upper()}_API_TOKEN."
            ) from None


def _load_secret_from_file(secret_name: str, env_var: str, environ: Mapping[str, str]) -> Optional[str]:
    """
    Load secret from /run/secrets (Docker secrets pattern).

    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)
    """
    secret_file = SECRETS_DIR / secret_name
    if secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
        except OSError as e:
            logger.warning("Failed to read %s: %s", secret_file, e)
        else:
            if secret_value:
                logger.debug("Loaded %s from %s", secret_name, SECRETS_DIR)
                return secret_value

    return environ.get(env_var) or None


def _get_bool(environ: Mapping[str, str], var_name: str, default: bool = False) -> bool:
    value = environ.get(var_name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_number(environ: Mapping[str, str], var_name: str, default, cast=int):
    value = environ.get(var_name)
    if value is None or value.strip() == "":
        return default
    try:
        return cast(value.strip())
    except ValueError:
        raise ConfigurationError(f"Environment variable {var_name} must be a number, got {value!r}.") from None


def _split_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def load_settings(environ: Optional[Mapping[str, str]] = None) -> OktaSettings:
    """Build OktaSettings from environment variables and /run/secrets.

    Recognized variables:
        OKTA_DEFAULT_CONNECTION, OKTA_CONNECTIONS, OKTA_LOG_CHANNELS,
        OKTA_<KEY>_BASE_URL, OKTA_<KEY>_API_TOKEN, OKTA_<KEY>_LOG_CHANNELS,
        OKTA_API_EXCEPTIONS, OKTA_RATE_LIMIT_THRESHOLD, OKTA_RATE_LIMIT_SLEEP,
        OKTA_MAX_PAGES, OKTA_REQUEST_TIMEOUT

    Connection values are not validated here; the client validates them
    before every request.
    """
    environ = os.environ if environ is None else environ

    log_channels = _split_list(environ.get("OKTA_LOG_CHANNELS", DEFAULT_CHANNEL)) or [DEFAULT_CHANNEL]

    connections: dict[str, Connection] = {}
    for key in _split_list(environ.get("OKTA_CONNECTIONS", DEFAULT_CONNECTIONS)):
        prefix = f"OKTA_{key.upper()}"
        base_url = environ.get(f"{prefix}_BASE_URL", "").strip()
        token = _load_secret_from_file(f"okta_{key.lower()}_api_token", f"{prefix}_API_TOKEN", environ) or ""
        if not base_url and not token:
            continue
        channels = _split_list(environ.get(f"{prefix}_LOG_CHANNELS", "")) or log_channels
        connections[key] = Connection(base_url=base_url, token=token, log_channels=tuple(channels))

    max_pages = _get_number(environ, "OKTA_MAX_PAGES", None)
    if max_pages is not None and max_pages < 1:
        raise ConfigurationError("Environment variable OKTA_MAX_PAGES must be at least 1.")

    settings = OktaSettings(
        default_connection=environ.get("OKTA_DEFAULT_CONNECTION", "prod").strip() or "prod",
        connections=connections,
        log_channels=log_channels,
        exceptions=_get_bool(environ, "OKTA_API_EXCEPTIONS"),
        rate_limit_threshold=_get_number(environ, "OKTA_RATE_LIMIT_THRESHOLD", 20),
        rate_limit_sleep=_get_number(environ, "OKTA_RATE_LIMIT_SLEEP", 10, float),
        max_pages=max_pages,
        request_timeout=_get_number(environ, "OKTA_REQUEST_TIMEOUT", REQUEST_TIMEOUT, float),
    )
    logger.debug(
        "Okta settings loaded; default_connection=%s connections=%s exceptions=%s",
        settings.default_connection,
        ",".join(connections) or "none",
        settings.exceptions,
    )
    return settings
