"""Logging setup for the server process.

All output goes to stderr: under the stdio transport, stdout carries MCP
frames and must stay clean.

Example:
    >>> configure_logging("DEBUG", "json")
    >>> logging.getLogger("restmcp.retry").info("retrying", extra={"attempt": 1})
    {"ts": "2026-01-03T10:30:45.120+00:00", "level": "info", "logger": "restmcp.retry", "event": "retrying", "attempt": 1}
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import TextIO

# Attributes every LogRecord carries; anything else came in through `extra=`
_RECORD_FIELDS: frozenset[str] = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime", "taskName"}

_TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class JsonFormatter(logging.Formatter):
    """One JSON object per line, with `extra=` context flattened in."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname.lower(),
            "logger": record.name,
            "event": record.getMessage(),
        }
        entry.update((k, v) for k, v in record.__dict__.items() if k not in _RECORD_FIELDS)
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def configure_logging(
    level: str | int = "INFO",
    format: str = "text",
    *,
    stream: TextIO | None = None,
) -> logging.Handler:
    """Install a single stderr handler on the `restmcp` logger.

    Safe to call repeatedly; earlier handlers installed here are replaced.
    """
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(JsonFormatter() if format == "json" else logging.Formatter(_TEXT_FORMAT))

    root = logging.getLogger("restmcp")
    for old in [h for h in root.handlers if getattr(h, "_restmcp", False)]:
        root.removeHandler(old)
    handler._restmcp = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(level.upper() if isinstance(level, str) else level)
    root.propagate = False
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    return handler
