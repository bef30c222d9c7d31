"""
Logging utilities for the Orchid Portal.

Provides a lightweight JSON formatter for structured logging in prod, plus a
filter that stamps each record with the id of the request being served.
"""

from __future__ import annotations

import contextvars
import json
import logging
from datetime import UTC, datetime

EMPTY_REQUEST_ID = "-" * 36

current_request_id: contextvars.ContextVar[str] = contextvars.ContextVar(
    "current_request_id", default=EMPTY_REQUEST_ID
)


class RequestIDFilter(logging.Filter):
    """Attach the current request id (set by RequestIDMiddleware) to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = current_request_id.get()
        return True


class PortalJSONFormatter(logging.Formatter):
    """Structured JSON log formatter for the prod environment."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", EMPTY_REQUEST_ID),
            "service": "orchid-portal",
        }
        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)
