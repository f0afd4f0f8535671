"""HTTP client for the Okta API.

Handles request construction, response normalization, pagination,
rate limit back-off, logging and optional typed errors.
"""
from __future__ import annotations
import platform
import time
from typing import Any, Callable, Mapping, Optional, Union
from urllib.parse import urlencode

import requests

from .._version import __version__
from ..config.settings import REQUEST_TIMEOUT, Connection, OktaSettings, load_settings
from .event_log import EventLogger, elapsed_ms
from .exceptions import OktaTransportError
from .pagination import flatten_pages, has_next_page, iter_pages
from .rate_limit import RateLimitGuard
from .response import ErrorEnvelope, NormalizedResponse, from_records, parse_api_response
from .response_log import log_response, raise_for_status_if_enabled
from .validators import validate_connection

API_PATH = "/api/v1/"

ConnectionLike = Union[Connection, Mapping[str, Any]]
Result = Union[NormalizedResponse, ErrorEnvelope]


def user_agent() -> str:
    return " ".join([
        f"okta-api-client/{__version__}",
        f"python-requests/{requests.__version__}",
        f"Python/{platform.python_version()}",
    ])


class OktaApiClient:
    """HTTP client for the Okta management API.

    Features:
    - Connection validation before every request
    - Automatic pagination of GET requests that return a next link
    - Rate limit back-off and hard stop based on x-rate-limit-* headers
    - Structured logging of every response
    - Optional typed errors for 4xx/5xx responses (``settings.exceptions``)

    Transport failures (DNS, timeouts, resets) never raise from the verb
    methods; they return an ErrorEnvelope instead.

    Usage:
        client = OktaApiClient(settings=load_settings())
        response = client.get("users", {"limit": 200})
        for user in response.data:
            ...
    """

    def __init__(
        self,
        connection_key: Optional[str] = None,
        settings: Optional[OktaSettings] = None,
        connection: Optional[ConnectionLike] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize the client.

        Args:
            connection_key: Key of a connection in ``settings.connections``
                (defaults to ``settings.default_connection``)
            settings: Client settings (defaults to OktaSettings())
            connection: Explicit connection, used instead of a settings lookup
            sleep: Delay function used by the rate limit guard

        Raises:
            ConfigurationError: If the connection is unknown or malformed
        """
        self.settings = settings or OktaSettings()
        self.events = EventLogger(self.settings.log_channels)
        if connection is None:
            connection = self.settings.connection(connection_key)
        self.connection = validate_connection(connection, self.events)
        self._sleep = sleep

    @classmethod
    def from_env(cls, connection_key: Optional[str] = None, **kwargs) -> "OktaApiClient":
        """Build a client from OKTA_* environment variables."""
        return cls(connection_key, settings=load_settings(), **kwargs)

    @property
    def timeout(self) -> float:
        return self.settings.request_timeout or REQUEST_TIMEOUT

    # ─────────────────────────────────────────────────────────────────────────
    # Public API
    # ─────────────────────────────────────────────────────────────────────────
    def test_connection(self, connection: Optional[ConnectionLike] = None) -> bool:
        """Check the token against ``GET /api/v1/org``."""
        response = self.get("org", connection=connection)
        if isinstance(response, ErrorEnvelope) or response.status.failed:
            return False

        org_id = response.data.get("id") if isinstance(response.data, dict) else None
        self.events.log(
            "okta.api.test.success",
            "debug",
            "Success",
            method="test_connection",
            metadata={"record_provider_id": org_id},
        )
        return True

    def get(self, uri: str, data: Optional[Mapping[str, Any]] = None, connection: Optional[ConnectionLike] = None) -> Result:
        """GET request; ``data`` is sent as query parameters.

        When Okta returns a next link, every page is fetched and ``data`` of
        the returned response is the flat list of all records.
        """
        conn = self._resolve_connection(connection)
        events = EventLogger(conn.log_channels)
        uri = uri.lstrip("/")
        url = self._url(conn, uri)
        started = time.monotonic()

        try:
            raw = requests.get(url, params=data or None, headers=self._headers(conn), timeout=self.timeout)
        except requests.exceptions.RequestException as exc:
            return self._handle_exception(events, exc, "get", uri)

        response = parse_api_response(raw)
        query_string = "?" + urlencode(data, doseq=True) if data else ""
        self._after_response(events, "get", url + query_string, response, started)

        if has_next_page(response.headers):
            response = self._get_paginated_results(events, conn, uri, response, started)
        return response

    def post(self, uri: str, data: Any = None, connection: Optional[ConnectionLike] = None) -> Result:
        """POST request with ``data`` as the JSON body."""
        return self._send("post", requests.post, uri, data, connection)

    def patch(self, uri: str, data: Any = None, connection: Optional[ConnectionLike] = None) -> Result:
        """Partial update; Okta has no PATCH verb so this is sent as POST."""
        return self._send("patch", requests.post, uri, data, connection)

    def put(self, uri: str, data: Any = None, connection: Optional[ConnectionLike] = None) -> Result:
        """PUT request with ``data`` as the JSON body (full replacement)."""
        return self._send("put", requests.put, uri, data, connection)

    def delete(self, uri: str, data: Any = None, connection: Optional[ConnectionLike] = None) -> Result:
        """DELETE request; ``data`` is sent as the JSON body when given."""
        return self._send("delete", requests.delete, uri, data, connection)

    # ─────────────────────────────────────────────────────────────────────────
    # Internals
    # ─────────────────────────────────────────────────────────────────────────
    def _resolve_connection(self, connection: Optional[ConnectionLike]) -> Connection:
        return validate_connection(connection if connection is not None else self.connection, self.events)

    def _url(self, connection: Connection, uri: str) -> str:
        return connection.base_url + API_PATH + uri.lstrip("/")

    def _headers(self, connection: Connection) -> dict[str, str]:
        return {
            "Authorization": f"SSWS {connection.token}",
            "Accept": "application/json",
            "User-Agent": user_agent(),
        }

    def _send(
        self,
        method: str,
        send: Callable[..., requests.Response],
        uri: str,
        data: Any,
        connection: Optional[ConnectionLike],
    ) -> Result:
        conn = self._resolve_connection(connection)
        events = EventLogger(conn.log_channels)
        uri = uri.lstrip("/")
        url = self._url(conn, uri)
        started = time.monotonic()

        try:
            raw = send(url, json=data, headers=self._headers(conn), timeout=self.timeout)
        except requests.exceptions.RequestException as exc:
            return self._handle_exception(events, exc, method, uri)

        response = parse_api_response(raw)
        self._after_response(events, method, url, response, started)
        return response

    def _after_response(
        self,
        events: EventLogger,
        method: str,
        url: str,
        response: NormalizedResponse,
        started: float,
        http_method: Optional[str] = None,
    ) -> None:
        log_response(events, method, url, response, started)
        RateLimitGuard(
            events,
            threshold_percent=self.settings.rate_limit_threshold,
            sleep_seconds=self.settings.rate_limit_sleep,
            sleep=self._sleep,
        ).check(method, url, response)
        raise_for_status_if_enabled(self.settings.exceptions, http_method or method, url, response)

    def _handle_exception(self, events: EventLogger, exc: Exception, method: str, uri: str) -> ErrorEnvelope:
        envelope = ErrorEnvelope.from_exception(exc, method, uri)
        events.log(
            f"okta.api.{method}.error.http.exception",
            "error",
            "HTTP Response Exception",
            method=method,
            errors={"code": envelope.code, "message": envelope.message},
            metadata={"uri": envelope.uri},
            exc_info=exc,
        )
        return envelope

    def _get_page(self, events: EventLogger, conn: Connection, url: str) -> NormalizedResponse:
        started = time.monotonic()
        try:
            raw = requests.get(url, headers=self._headers(conn), timeout=self.timeout)
        except requests.exceptions.RequestException as exc:
            events.log(
                "okta.api.get_paginated_results.error.http.exception",
                "error",
                "HTTP Response Exception",
                method="get_paginated_results",
                errors={"message": str(exc)},
                metadata={"url": url},
                exc_info=exc,
            )
            raise OktaTransportError(str(exc), method="get", url=url) from exc

        page = parse_api_response(raw)
        self._after_response(events, "get_paginated_results", url, page, started, http_method="get")
        return page

    def _get_paginated_results(
        self,
        events: EventLogger,
        conn: Connection,
        uri: str,
        first: NormalizedResponse,
        started: float,
    ) -> NormalizedResponse:
        metadata = {"okta_request_id": first.request_id, "uri": uri}
        events.log(
            "okta.api.get.process.pagination.started",
            "debug",
            "Paginated Results Process Started",
            method="get",
            metadata=metadata,
        )

        pages = list(iter_pages(first, lambda url: self._get_page(events, conn, url), self.settings.max_pages))
        last = pages[-1]
        if last.status.ok and has_next_page(last.headers):
            events.log(
                "okta.api.get.process.pagination.truncated",
                "warning",
                f"Paginated Results Stopped After {len(pages)} Pages (max_pages)",
                method="get",
                metadata=metadata,
            )

        response = from_records(flatten_pages(pages), first, status=last.status if last.status.failed else None)

        count_records = len(response.data)
        duration_ms = elapsed_ms(started)
        events.log(
            "okta.api.get.process.pagination.finished",
            "debug",
            "Paginated Results Process Complete",
            method="get",
            metadata=metadata,
            count_records=count_records,
            duration_ms=duration_ms,
            duration_ms_per_record=duration_ms // count_records if count_records else None,
        )
        return response
