"""Logging setup for the API and the portal.

Records carry request and customer context as ``extra`` attributes
(``method``, ``path``, ``account_id`` ...). Both formatters render those
fields, JSON as top-level keys for log shippers and the console formatter
as a trailing ``key=value`` list.
"""

import json
import logging
import sys
import traceback
from datetime import datetime, timezone
from typing import Any, Mapping

from .config import settings

# Context attributes rendered by the formatters, in output order
CONTEXT_FIELDS = (
    "method",
    "path",
    "status_code",
    "error_code",
    "account_id",
    "ip",
    "user_agent",
    "environment",
    "version",
)


def record_context(record: logging.LogRecord) -> dict[str, Any]:
    """Context fields present on ``record``; unset and ``None`` values are skipped."""
    context = {}
    for name in CONTEXT_FIELDS:
        value = getattr(record, name, None)
        if value is not None:
            context[name] = value
    return context


def _timestamp(record: logging.LogRecord) -> datetime:
    return datetime.fromtimestamp(record.created, tz=timezone.utc)


class JSONFormatter(logging.Formatter):
    """One JSON object per record, context fields at the top level."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": _timestamp(record).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(record_context(record))

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc, tb = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc),
                "traceback": traceback.format_exception(exc_type, exc, tb),
            }
        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Coloured single-line output for development."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        line = (
            f"{_timestamp(record):%Y-%m-%d %H:%M:%S} {color}{record.levelname:8}{self.RESET} "
            f"{record.name}: {record.getMessage()}"
        )
        context = record_context(record)
        if context:
            line += " [" + " ".join(f"{key}={value}" for key, value in context.items()) + "]"
        if record.exc_info:
            line += "\n" + "".join(traceback.format_exception(*record.exc_info))
        return line


def build_formatter() -> logging.Formatter:
    """``LOG_FORMAT`` wins; otherwise JSON in production and console elsewhere."""
    if settings.log_format == "json":
        return JSONFormatter()
    if settings.log_format == "console":
        return ConsoleFormatter()
    return JSONFormatter() if settings.is_production else ConsoleFormatter()


def setup_logging() -> None:
    """Install a single stdout handler on the root logger."""
    level = getattr(logging, settings.log_level.upper())

    root = logging.getLogger()
    root.setLevel(level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(build_formatter())
    handler.setLevel(level)
    root.addHandler(handler)

    for noisy in ("httpx", "httpcore", "asyncio"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if settings.db_echo else logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class LoggerAdapter(logging.LoggerAdapter):
    """Adds fixed context to every record; per-call ``extra`` wins on clashes."""

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


def bind(logger: logging.Logger, context: Mapping[str, Any]) -> LoggerAdapter:
    """Logger that stamps ``context`` onto each record it emits."""
    return LoggerAdapter(logger, dict(context))
