"""Structured Logging — JSON formatter and setup for production observability.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Extra fields (movie_id, error_code, path, port) surfaced when present
    - Logs go to standard error; JSON in production, human-readable in development
    - Lifecycle announcements (the startup line) go to standard output as plain
      text, once, and never through the root handler

Design Decisions:
    - JSONFormatter over third-party libs: zero dependencies, full control
    - setup_logging called once by the server entry point; uvicorn runs with
      log_config=None so its records flow through the same root handler
"""

import logging
import json
import sys
from datetime import datetime, timezone

ANNOUNCE_LOGGER = "movie_api.announce"

_EXTRA_FIELDS = ("movie_id", "error_code", "path", "method", "port")


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
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


def setup_logging(level: str = "INFO", fmt: str = "json"):
    """Configure logging for the application."""
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s - %(message)s",
        ))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler


class StdoutHandler(logging.StreamHandler):
    """StreamHandler writing to whatever sys.stdout is at emit time."""

    def __init__(self):
        super().__init__(sys.stdout)

    @property
    def stream(self):
        return sys.stdout

    @stream.setter
    def stream(self, value):
        pass


def get_announcer() -> logging.Logger:
    """Logger for plain one-line announcements on standard output."""
    announcer = logging.getLogger(ANNOUNCE_LOGGER)
    if not any(isinstance(h, StdoutHandler) for h in announcer.handlers):
        handler = StdoutHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))
        announcer.addHandler(handler)
        announcer.setLevel(logging.INFO)
        announcer.propagate = False
    return announcer
