"""Logging Setup.

Installs one root handler for the notification client. JSON lines are
meant for log shipping; the console format is for running the CLI by
hand. Output goes to stderr so CLI results on stdout stay parseable.
"""

import json
import logging
import os
import sys
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Optional

from src.logging_config.config import DEFAULT_LOGGING_CONFIG, LogFormat, LoggingConfig, LogLevel
from src.logging_config.context import get_context_dict

# LogRecord attributes copied into the output when a call passes them via extra=
EXTRA_FIELDS = ("duration_ms", "status_code", "method", "path", "notification_id", "ticket_id")

NOISY_LOGGERS = ("asyncio", "httpx", "httpcore")


def _record_extras(record: logging.LogRecord) -> dict[str, Any]:
    return {key: getattr(record, key) for key in EXTRA_FIELDS if hasattr(record, key)}


class StructuredFormatter(logging.Formatter):
    """One JSON object per line.

    Always present: timestamp, level, logger, message, service. Session
    context and known extras are merged in when set.
    """

    def __init__(self, service_name: str = "tripmanager", include_caller: bool = True):
        super().__init__()
        self.service_name = service_name
        self.include_caller = include_caller

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
        }
        if self.include_caller:
            entry.update(module=record.module, function=record.funcName, line=record.lineno)

        entry.update(get_context_dict())
        entry.update(_record_extras(record))

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, _ = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": self.formatException(record.exc_info),
            }
        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Colored single-line output for interactive use."""

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        clock = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")

        fields = {**get_context_dict(), **_record_extras(record)}
        suffix = ""
        if fields:
            suffix = " [" + ", ".join(f"{k}={v}" for k, v in fields.items()) + "]"

        line = f"{color}{clock} {record.levelname:<8}{self.RESET} {record.name}: {record.getMessage()}{suffix}"
        if record.exc_info and record.exc_info[0] is not None:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def resolve_config(config: Optional[LoggingConfig] = None) -> LoggingConfig:
    """Apply TRIPMANAGER_LOG_LEVEL / TRIPMANAGER_LOG_FORMAT on top of ``config``.

    Unrecognized values are ignored.
    """
    config = config or DEFAULT_LOGGING_CONFIG

    level = os.environ.get("TRIPMANAGER_LOG_LEVEL", "").strip().upper()
    if level in LogLevel.__members__:
        config = replace(config, level=LogLevel[level])

    fmt = os.environ.get("TRIPMANAGER_LOG_FORMAT", "").strip().lower()
    if fmt in {f.value for f in LogFormat}:
        config = replace(config, format=LogFormat(fmt))

    return config


def configure_logging(config: Optional[LoggingConfig] = None) -> LoggingConfig:
    """Replace the root handlers with a single stderr handler.

    Returns the effective configuration after environment overrides.
    """
    config = resolve_config(config)

    if config.format == LogFormat.JSON:
        formatter: logging.Formatter = StructuredFormatter(config.service_name, config.include_caller)
    else:
        formatter = ConsoleFormatter()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(config.level.value)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return config


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
