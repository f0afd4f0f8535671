"""Rate limit guard driven by Okta's ``x-rate-limit-*`` response headers."""
from __future__ import annotations
import math
import time
from typing import Callable, Mapping, Optional

from .event_log import EventLogger
from .exceptions import RateLimitError
from .response import HeaderValue, NormalizedResponse, header_scalar

DEFAULT_THRESHOLD_PERCENT = 20
DEFAULT_SLEEP_SECONDS = 10


def _header_int(headers: Mapping[str, HeaderValue], name: str) -> Optional[int]:
    value = header_scalar(headers, name)
    if value is None:
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def percent_remaining(headers: Mapping[str, HeaderValue]) -> Optional[int]:
    """Percentage of the quota left, rounded half up (None without usable headers)."""
    remaining = _header_int(headers, "x-rate-limit-remaining")
    limit = _header_int(headers, "x-rate-limit-limit")
    if remaining is None or not limit:
        return None
    return math.floor(remaining / limit * 100 + 0.5)


class RateLimitGuard:
    """Back off when the quota runs low and stop when it is exhausted.

    Both checks run after every response that carries
    ``x-rate-limit-remaining``:

    - percent remaining <= threshold: log critical, then sleep a fixed delay
    - remaining <= 1: log critical, then raise RateLimitError

    ``sleep`` is injectable so callers can swap in a non-blocking delay.
    """

    def __init__(
        self,
        events: EventLogger,
        threshold_percent: int = DEFAULT_THRESHOLD_PERCENT,
        sleep_seconds: float = DEFAULT_SLEEP_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.events = events
        self.threshold_percent = threshold_percent
        self.sleep_seconds = sleep_seconds
        self.sleep = sleep

    def _metadata(self, url: str, response: NormalizedResponse) -> dict:
        return {
            "okta_request_id": response.request_id,
            "okta_rate_limit_limit": header_scalar(response.headers, "x-rate-limit-limit"),
            "okta_rate_limit_remaining": header_scalar(response.headers, "x-rate-limit-remaining"),
            "url": url,
        }

    def check(self, method: str, url: str, response: NormalizedResponse) -> None:
        if "x-rate-limit-remaining" not in response.headers:
            return
        self.check_approaching(method, url, response)
        self.check_exceeded(method, url, response)

    def check_approaching(self, method: str, url: str, response: NormalizedResponse) -> bool:
        """Sleep when the quota is at or under the threshold. Returns True if it slept."""
        percent = percent_remaining(response.headers)
        if percent is None or percent > self.threshold_percent:
            return False

        metadata = self._metadata(url, response)
        metadata["okta_rate_limit_percent"] = percent
        self.events.log(
            "okta.api.rate-limit.approaching",
            "critical",
            " ".join([
                f"Rate Limit Approaching ({percent}% Remaining).",
                f"Sleeping for {self.sleep_seconds:g} seconds between requests to let the API catch a breath.",
            ]),
            method=method,
            metadata=metadata,
        )
        self.sleep(self.sleep_seconds)
        return True

    def check_exceeded(self, method: str, url: str, response: NormalizedResponse) -> None:
        """Raise RateLimitError when one request or less remains in the window.

        Raises:
            RateLimitError: Always when remaining <= 1, whatever the status code
        """
        remaining = _header_int(response.headers, "x-rate-limit-remaining")
        if remaining is None or remaining > 1:
            return

        self.events.log(
            "okta.api.rate-limit.exceeded",
            "critical",
            " ".join([
                "Rate Limit Exceeded.",
                "This request should be refactored so we do not cause the API any further harm.",
            ]),
            method=method,
            metadata=self._metadata(url, response),
        )
        raise RateLimitError(
            "Okta API rate limit exceeded. See logs for details.",
            status_code=response.status.code,
            method=method,
            url=url,
            response=response,
        )
