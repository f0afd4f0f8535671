"""Response normalization for the Okta API.

Every HTTP response that made it over the wire is converted into a
``NormalizedResponse`` with fixed ``data``, ``headers`` and ``status`` fields.
Transport failures produce an ``ErrorEnvelope`` instead.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence, Union

import requests

HeaderValue = Union[str, list]


@dataclass(frozen=True)
class ResponseStatus:
    """Status flags derived from an HTTP status code."""
    code: int
    ok: bool
    successful: bool
    failed: bool
    server_error: bool
    client_error: bool

    @classmethod
    def from_code(cls, code: int) -> "ResponseStatus":
        ok = 200 <= code < 300
        return cls(
            code=code,
            ok=ok,
            successful=ok,
            failed=not ok,
            server_error=500 <= code < 600,
            client_error=400 <= code < 500,
        )

    @classmethod
    def transport_failure(cls, code: int = 0) -> "ResponseStatus":
        """Status attached to an ErrorEnvelope (nothing came back from Okta)."""
        return cls(
            code=code,
            ok=False,
            successful=False,
            failed=True,
            server_error=True,
            client_error=False,
        )

    @property
    def serverError(self) -> bool:
        return self.server_error

    @property
    def clientError(self) -> bool:
        return self.client_error

    def as_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "ok": self.ok,
            "successful": self.successful,
            "failed": self.failed,
            "serverError": self.server_error,
            "clientError": self.client_error,
        }


@dataclass(frozen=True)
class NormalizedResponse:
    """Canonical ``{data, headers, status}`` result of one call.

    Attributes:
        data: Parsed JSON body (dict or list), the accumulated records of a
            paginated GET, or None for an empty body
        headers: Lowercased header names; single values collapsed to a string
        status: Status flags
    """
    data: Any
    headers: dict[str, HeaderValue] = field(default_factory=dict)
    status: ResponseStatus = field(default_factory=lambda: ResponseStatus.from_code(200))

    @property
    def request_id(self) -> Optional[str]:
        return header_scalar(self.headers, "x-okta-request-id")

    def error_field(self, name: str) -> Any:
        """Return an Okta error body field (errorCode, errorSummary, ...) if present."""
        if isinstance(self.data, dict):
            return self.data.get(name)
        return None

    def as_dict(self) -> dict[str, Any]:
        return {"data": self.data, "headers": dict(self.headers), "status": self.status.as_dict()}


@dataclass(frozen=True)
class ErrorEnvelope:
    """Uniform result for a request that failed at the transport level."""
    code: int
    message: str
    method: str
    uri: str
    status: ResponseStatus

    @classmethod
    def from_exception(cls, exc: Exception, method: str, uri: str) -> "ErrorEnvelope":
        code = getattr(exc, "errno", None) or 0
        return cls(
            code=code,
            message=str(exc),
            method=method,
            uri=uri.lstrip("/"),
            status=ResponseStatus.transport_failure(code),
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "method": self.method,
                "uri": self.uri,
            },
            "status": self.status.as_dict(),
        }


def normalize_headers(raw_headers: Mapping[str, Union[str, Sequence[str]]]) -> dict[str, HeaderValue]:
    """Collapse single-valued headers to a scalar and keep multi-valued ones as lists.

    Each header is handled on its own: ``{"link": [a, b], "x-rate-limit-limit": ["600"]}``
    becomes ``{"link": [a, b], "x-rate-limit-limit": "600"}``.
    """
    headers: dict[str, HeaderValue] = {}
    for name, value in raw_headers.items():
        if isinstance(value, (list, tuple)):
            headers[name.lower()] = value[0] if len(value) == 1 else list(value)
        else:
            headers[name.lower()] = value
    return headers


def header_scalar(headers: Mapping[str, HeaderValue], name: str) -> Optional[str]:
    """Return a header as a single string (the last value if it was repeated)."""
    value = headers.get(name)
    if isinstance(value, list):
        return value[-1] if value else None
    return value


def _header_lists(response: requests.Response) -> dict[str, list[str]]:
    """Read every header with all of its values.

    ``requests`` joins repeated headers with commas, which breaks ``Link``
    headers, so the underlying urllib3 headers are preferred when present.
    """
    raw_headers = getattr(getattr(response, "raw", None), "headers", None)
    if raw_headers is not None and hasattr(raw_headers, "getlist"):
        collected: dict[str, list[str]] = {}
        for name in raw_headers:
            key = name.lower()
            if key not in collected:
                collected[key] = list(raw_headers.getlist(name))
        return collected
    return {name: value if isinstance(value, list) else [value] for name, value in response.headers.items()}


def _parse_body(response: requests.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


def parse_api_response(response: requests.Response) -> NormalizedResponse:
    """Convert a ``requests.Response`` into a NormalizedResponse."""
    return NormalizedResponse(
        data=_parse_body(response),
        headers=normalize_headers(_header_lists(response)),
        status=ResponseStatus.from_code(response.status_code),
    )


def from_records(
    records: list,
    previous: NormalizedResponse,
    status: Optional[ResponseStatus] = None,
) -> NormalizedResponse:
    """Build the aggregate response of a paginated walk.

    Headers are kept from ``previous`` (the first page), and so is the status
    unless another one is given.
    """
    return NormalizedResponse(data=records, headers=previous.headers, status=status or previous.status)
