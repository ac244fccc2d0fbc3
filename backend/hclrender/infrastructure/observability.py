"""Structured Logging — JSON formatter and one-shot setup for the render service.

Invariants:
    - Every record carries timestamp, level, logger name and message
    - Render extras (document_path, function_name, error_code, block,
      output_format) appear only when the caller passed them via `extra=`
    - setup_logging replaces previously installed handlers (idempotent reloads)

Design Decisions:
    - Hand-written JSONFormatter on stdlib logging: one handler, no extra dependency
    - Called once from the app lifespan, never at import time
"""

import json
import logging
from datetime import datetime, timezone

_EXTRA_FIELDS = (
    "document_path", "function_name", "error_code", "block",
    "output_format", "path",
)


class JSONFormatter(logging.Formatter):
    """One JSON object per log line."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
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
        return json.dumps(log, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Install a single stream handler on the root logger."""
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
        ))
    for existing in list(logging.root.handlers):
        if getattr(existing, "_hclrender", False):
            logging.root.removeHandler(existing)
    handler._hclrender = True
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
