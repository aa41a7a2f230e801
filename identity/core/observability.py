"""Structured Logging: JSON formatter and setup for the identity store.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Extra fields (login, user_id) surfaced when present
"""

import json
import logging
from datetime import UTC, datetime

from identity.config import get_settings

_EXTRA_FIELDS = ("login", "user_id")


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


def setup_logging(level: str | None = None, fmt: str | None = None) -> logging.Handler:
    """
    Configure the root logger once, at application startup. Omitted arguments
    come from Settings.log_level and Settings.log_format.
    """
    settings = get_settings()
    level = level or settings.log_level
    fmt = fmt or settings.log_format
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s - %(message)s"))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler
