"""
AstroStorm Structured JSON Logging

Provides structured logging with JSON output for services embedding the
engine. Engines log through module loggers; callers choose the output format.
"""

import json
import logging
import sys

from typing import Any

# LogRecord attributes that are not user supplied extras
_RESERVED_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "getMessage",
        "exc_info",
        "exc_text",
        "stack_info",
    }
)


class JsonFormatter(logging.Formatter):
    """JSON formatter for structured logging output"""

    def format(self, record: logging.LogRecord) -> str:
        """
        Format log record as JSON

        Args:
            record: Python logging record

        Returns:
            JSON-formatted log string
        """
        base = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            base["exception"] = self.formatException(record.exc_info)

        # Extra fields from logger.info("msg", extra={...})
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                base[key] = value

        return json.dumps(base, default=str)


def setup_logging(level: str = "INFO", format_json: bool = True) -> None:
    """
    Setup structured logging for AstroStorm

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: Whether to use JSON formatting
    """
    root = logging.getLogger()
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)

    if format_json:
        handler.setFormatter(JsonFormatter())
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        handler.setFormatter(formatter)

    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper()))


def get_logger(
    name: str, extra_fields: dict[str, Any] | None = None
) -> logging.Logger | logging.LoggerAdapter:
    """
    Get logger with optional extra fields

    Args:
        name: Logger name (usually __name__)
        extra_fields: Additional fields to include in all log messages

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if extra_fields:
        return logging.LoggerAdapter(logger, extra_fields)

    return logger


def get_engine_logger(engine: str) -> logging.LoggerAdapter:
    """Get logger for an analytics engine (shadbala, yoga, dasha, ...)"""
    return get_logger(
        f"astrostorm.engine.{engine}", {"layer": "engine", "engine": engine}
    )


def get_ephemeris_logger(component: str) -> logging.LoggerAdapter:
    """Get logger for ephemeris adapter and classification code"""
    return get_logger(
        f"astrostorm.ephemeris.{component}",
        {"layer": "ephemeris", "component": component},
    )


def setup_logging_from_settings() -> None:
    """Apply ASTROSTORM_LOG_LEVEL and ASTROSTORM_LOG_JSON to the root logger."""
    from astrostorm.config.settings import get_settings

    settings = get_settings()
    setup_logging(level=settings.log_level, format_json=settings.log_json)
