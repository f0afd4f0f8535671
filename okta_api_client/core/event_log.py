"""Structured event logging for Okta API calls.

Every event is written to each configured log channel. A channel is a
standard ``logging`` logger name, so routing to files, syslog or anything
else is done with regular handler configuration.
"""
from __future__ import annotations
import logging
import time
from typing import Any, Iterable, Optional

DEFAULT_CHANNEL = "okta_api_client"

NOTICE = 25
logging.addLevelName(NOTICE, "NOTICE")

LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "notice": NOTICE,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


def elapsed_ms(started: float) -> int:
    """Milliseconds since a ``time.monotonic()`` timestamp."""
    return int((time.monotonic() - started) * 1000)


class EventLogger:
    """Fan structured events out to one or more log channels.

    Usage:
        events = EventLogger(["okta_api_client", "audit"])
        events.log("okta.api.get.success", "debug", "Success", method="get")

    The structured payload is attached to each record as ``record.okta``.
    """

    def __init__(self, channels: Optional[Iterable[str]] = None):
        self.channels = list(channels or [DEFAULT_CHANNEL])
        self._loggers = [logging.getLogger(channel) for channel in self.channels]

    def log(
        self,
        event_type: str,
        level: str,
        message: str,
        *,
        method: str,
        metadata: Optional[dict[str, Any]] = None,
        errors: Optional[dict[str, Any]] = None,
        count_records: Optional[int] = None,
        duration_ms: Optional[int] = None,
        duration_ms_per_record: Optional[int] = None,
        exc_info: Any = None,
    ) -> dict[str, Any]:
        """Emit one event and return the payload that was logged.

        Raises:
            ValueError: If level is not one of LEVELS
        """
        try:
            levelno = LEVELS[level]
        except KeyError:
            raise ValueError(f"Unknown log level: {level}") from None

        event: dict[str, Any] = {
            "event_type": event_type,
            "level": level,
            "message": message,
            "method": method,
            "metadata": metadata or {},
        }
        if errors:
            event["errors"] = errors
        if count_records is not None:
            event["count_records"] = count_records
        if duration_ms is not None:
            event["duration_ms"] = duration_ms
        if duration_ms_per_record is not None:
            event["duration_ms_per_record"] = duration_ms_per_record

        for logger in self._loggers:
            logger.log(levelno, "%s %s", event_type, message, extra={"okta": event}, exc_info=exc_info)
        return event
