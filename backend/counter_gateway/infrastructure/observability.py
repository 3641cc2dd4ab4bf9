"""Structured Logging — JSON and key=value formatters, configured once per process.

Invariants:
    - Every line carries timestamp, level, logger name and message
    - Request/chain context (path, signature, counter_address, ...) is attached
      via logging `extra=` and surfaced by both formatters when present
    - LOG_FORMAT=json in deployed environments, text for local development

Design Decisions:
    - Formatters on stdlib logging: no logging dependency beyond the standard library
    - setup_logging replaces its own handler instead of stacking a new one,
      so repeated app startups in tests do not duplicate output
"""

import json
import logging
from datetime import datetime, timezone

HANDLER_NAME = "counter_gateway"

CONTEXT_KEYS = (
    "error_code", "path", "method", "status_code", "duration_ms",
    "signature", "counter_address", "cluster", "program_id",
)


def _context(record: logging.LogRecord) -> dict:
    return {
        key: record.__dict__[key]
        for key in CONTEXT_KEYS
        if record.__dict__.get(key) is not None
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_context(record),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable line with context appended as key=value pairs."""

    def __init__(self):
        super().__init__("%(asctime)s %(levelname)s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = _context(record)
        if context:
            line += " " + " ".join(f"{k}={v}" for k, v in context.items())
        return line


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Install the gateway's root handler at the given level and format."""
    handler = logging.StreamHandler()
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(JSONFormatter() if fmt == "json" else TextFormatter())

    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == HANDLER_NAME:
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
