"""
Logging configuration for the pizza services.

All services log to stdout.  ``LOG_FORMAT=json`` switches to one JSON object
per line for log shippers; anything else keeps the human-readable format.
Records logged with ``extra={"trace_id": ...}`` carry the request's trace id.
"""
from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone

NO_TRACE = "-"


class _TraceIdFilter(logging.Filter):
    """Give every record a ``trace_id`` so the text format can always render it."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        if not hasattr(record, "trace_id"):
            record.trace_id = NO_TRACE
        return True


class _JSONFormatter(logging.Formatter):
    """Emit each log record as a single-line JSON object."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        trace_id = getattr(record, "trace_id", NO_TRACE)
        if trace_id != NO_TRACE:
            log_entry["trace_id"] = trace_id
        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, ensure_ascii=False)


def configure_logging(level: str = "INFO", fmt: str = "text") -> None:
    """Install a single stdout handler on the root logger."""
    root = logging.getLogger()
    root.setLevel(level)

    # Remove existing handlers to avoid duplicate output
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.addFilter(_TraceIdFilter())

    if fmt == "json":
        handler.setFormatter(_JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s [%(levelname)s] %(name)s [trace=%(trace_id)s] - %(message)s"
            )
        )

    root.addHandler(handler)
