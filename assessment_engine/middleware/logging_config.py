"""
Structured logging configuration.

- ``LOG_FORMAT=json``      one JSON object per line (log aggregators)
- ``LOG_FORMAT=readable``  one colored line per record (local work)
- unset                    JSON in production, readable otherwise

Decision logs carry ``event_type`` / ``assessment_id`` / ``actor_role``
extras; both formats surface them.
"""

import json
import logging
import sys
from datetime import datetime, timezone

# Request extras set by the timing middleware
REQUEST_FIELDS = ("method", "path", "status", "duration_ms", "remote_addr", "request_id")

# Decision extras set by the blueprints and services
DECISION_FIELDS = ("event_type", "assessment_id", "actor_role")


class JSONFormatter(logging.Formatter):
    """JSON log formatter for production / log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in REQUEST_FIELDS + DECISION_FIELDS:
            val = getattr(record, key, None)
            if val is not None:
                entry[key] = val
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class ReadableFormatter(logging.Formatter):
    """One line per record: time, level, logger, <event> [assessment], message."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_color: bool = True):
        super().__init__()
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        level = f"{record.levelname:<8}"
        if self.use_color:
            level = f"{self.COLORS.get(record.levelname, '')}{level}{self.RESET}"

        tags = ""
        event = getattr(record, "event_type", None)
        if event:
            tags += f" <{event}>"
        assessment_id = getattr(record, "assessment_id", None)
        if assessment_id:
            tags += f" [{assessment_id}]"

        duration = getattr(record, "duration_ms", None)
        timing = f" [{duration:.0f}ms]" if duration is not None else ""

        ts = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        line = f"{ts} {level} {record.name}:{tags} {record.getMessage()}{timing}"
        if record.exc_info and record.exc_info[0] is not None:
            line += "\n" + self.formatException(record.exc_info)
        return line


def build_formatter(config, stream=None) -> logging.Formatter:
    """Pick the formatter from ``LOG_FORMAT``, falling back on the environment."""
    fmt = (config.get("LOG_FORMAT") or "").lower()
    if not fmt:
        is_prod = not config.get("DEBUG", False) and not config.get("TESTING", False)
        fmt = "json" if is_prod else "readable"
    if fmt == "json":
        return JSONFormatter()
    stream = stream or sys.stderr
    return ReadableFormatter(use_color=hasattr(stream, "isatty") and stream.isatty())


def resolve_level(config) -> int:
    """``LOG_LEVEL`` from config; DEBUG outside production, INFO in it."""
    default = "DEBUG" if config.get("DEBUG") or config.get("TESTING") else "INFO"
    name = (config.get("LOG_LEVEL") or default).upper()
    return getattr(logging, name, logging.INFO)


def configure_logging(app):
    """Install a single stderr handler on the root logger for this app."""
    level = resolve_level(app.config)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(build_formatter(app.config, sys.stderr))
    handler.setLevel(level)

    root = logging.getLogger()
    # Replace, not add: create_app runs more than once per test session
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    logging.getLogger("werkzeug").setLevel(logging.WARNING)
    app.logger.setLevel(level)

    if not app.config.get("TESTING", False):
        app.logger.info("Logging configured: level=%s format=%s",
                        logging.getLevelName(level),
                        type(handler.formatter).__name__)
