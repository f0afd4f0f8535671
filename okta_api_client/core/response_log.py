"""Status code classification, response logging and typed error mapping."""
from __future__ import annotations
import json
from dataclasses import dataclass
from typing import Any, Optional

from .event_log import EventLogger, elapsed_ms
from .exceptions import (
    BadRequestError,
    ConflictError,
    ForbiddenError,
    MethodNotAllowedError,
    NotFoundError,
    OktaAPIError,
    PreconditionFailedError,
    RateLimitError,
    ServerError,
    UnauthorizedError,
    UnprocessableError,
)
from .response import NormalizedResponse, header_scalar


@dataclass(frozen=True)
class StatusClass:
    """How a status code is logged and which error it maps to."""
    event_type: str
    level: str
    error: Optional[type] = None


STATUS_TABLE: dict[int, StatusClass] = {
    200: StatusClass("success", "debug"),
    201: StatusClass("success", "debug"),
    202: StatusClass("success", "debug"),
    204: StatusClass("success", "debug"),
    400: StatusClass("warning.bad-request", "warning", BadRequestError),
    401: StatusClass("error.unauthorized", "error", UnauthorizedError),
    403: StatusClass("error.forbidden", "error", ForbiddenError),
    404: StatusClass("warning.not-found", "warning", NotFoundError),
    405: StatusClass("error.method-not-allowed", "error", MethodNotAllowedError),
    409: StatusClass("error.conflict", "error", ConflictError),
    412: StatusClass("error.precondition-failed", "error", PreconditionFailedError),
    422: StatusClass("error.unprocessable", "error", UnprocessableError),
    429: StatusClass("critical.rate-limit", "critical", RateLimitError),
    500: StatusClass("critical.server-error", "critical", ServerError),
    501: StatusClass("error.not-implemented", "error"),
    503: StatusClass("critical.server-unavailable", "critical"),
}

UNAUTHORIZED_MESSAGE = " ".join([
    "The Okta API token has been configured but is invalid.",
    "(Reason) This usually happens if it does not exist or expired after 30 days of inactivity.",
    "(Solution) Please generate a new API token and update your configuration.",
])


def classify_status(code: int) -> StatusClass:
    """Map an HTTP status code to its log event, level and error class.

    Codes outside STATUS_TABLE fall back to their status range.
    """
    known = STATUS_TABLE.get(code)
    if known is not None:
        return known
    if 200 <= code < 300:
        return StatusClass("success", "debug")
    if 400 <= code < 500:
        return StatusClass("warning.client-error", "warning")
    if 500 <= code < 600:
        return StatusClass("critical.server-error", "critical")
    return StatusClass("notice.unknown", "notice")


def _message_for(response: NormalizedResponse) -> str:
    if response.status.client_error:
        return "Client Error"
    if response.status.server_error:
        return "Server Error"
    return "Success"


def log_response(
    events: EventLogger,
    method: str,
    url: str,
    response: NormalizedResponse,
    started: Optional[float] = None,
) -> dict[str, Any]:
    """Log the outcome of one request and return the logged event."""
    status_class = classify_status(response.status.code)

    errors: dict[str, Any] = {}
    if response.error_field("errorCode") is not None:
        errors["error_code"] = response.error_field("errorCode")
    if response.error_field("errorSummary") is not None:
        errors["error_message"] = response.error_field("errorSummary")
    if response.error_field("errorCauses"):
        errors["error_causes"] = response.error_field("errorCauses")
    if response.error_field("errorId") is not None:
        errors["error_id"] = response.error_field("errorId")
    if response.error_field("errorLink") is not None:
        errors["error_link"] = response.error_field("errorLink")
    if response.status.failed:
        errors["status_code"] = response.status.code

    count_records = None
    if response.status.ok and isinstance(response.data, list):
        count_records = len(response.data)

    duration_ms = elapsed_ms(started) if started is not None else None
    duration_ms_per_record = None
    if duration_ms is not None and count_records and count_records > 1:
        duration_ms_per_record = duration_ms // count_records

    return events.log(
        f"okta.api.{method}.{status_class.event_type}",
        status_class.level,
        _message_for(response),
        method=method,
        metadata={
            "okta_request_id": response.request_id,
            "rate_limit_remaining": header_scalar(response.headers, "x-rate-limit-remaining"),
            "url": url,
        },
        errors=errors,
        count_records=count_records,
        duration_ms=duration_ms,
        duration_ms_per_record=duration_ms_per_record,
    )


def build_error_message(method: str, url: str, response: NormalizedResponse) -> str:
    """Compose ``METHOD STATUS URL [errorCode errorSummary]``."""
    parts = [
        method.upper(),
        str(response.status.code),
        url,
        response.error_field("errorCode"),
        response.error_field("errorSummary"),
    ]
    return " ".join(str(part) for part in parts if part)


def error_for_status(method: str, url: str, response: NormalizedResponse) -> Optional[OktaAPIError]:
    """Return the typed error for a response, or None if the status has none."""
    error_class = classify_status(response.status.code).error
    if error_class is None:
        return None

    code = response.status.code
    if code == 401:
        message = UNAUTHORIZED_MESSAGE
    elif code == 500:
        message = json.dumps(response.data)
    else:
        message = build_error_message(method, url, response)
    return error_class(message, status_code=code, method=method, url=url, response=response)


def raise_for_status_if_enabled(enabled: bool, method: str, url: str, response: NormalizedResponse) -> None:
    """Raise the typed error for a 4xx/5xx response when exceptions are enabled.

    Raises:
        OktaAPIError: Subclass matching the status code
    """
    if not enabled:
        return
    error = error_for_status(method, url, response)
    if error is not None:
        raise error