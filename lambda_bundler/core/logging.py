"""Structured logging configuration — structlog + stdlib logging."""

from __future__ import annotations

import logging
import logging.config
import os

import structlog

_VERBOSITY_LEVELS = {1: "INFO", 2: "DEBUG"}


def resolve_log_level(verbosity: int = 0) -> str:
    """Pick the log level for a ``-v`` count, falling back to the environment."""
    if verbosity <= 0:
        return os.environ.get("LAMBDA_BUNDLER_LOG_LEVEL", "INFO").upper()
    return _VERBOSITY_LEVELS.get(verbosity, "DEBUG")


def setup_logging(verbosity: int = 0) -> None:
    """Configure structlog and stdlib logging.

    Reads from environment variables:
        LAMBDA_BUNDLER_LOG_LEVEL  — log level when no -v flag is given (default: INFO)
        LAMBDA_BUNDLER_LOG_FORMAT — console | json (default: console)

    A verbosity of 3 or more also turns on per-file copy events.
    """
    log_level = resolve_log_level(verbosity)
    log_format = os.environ.get("LAMBDA_BUNDLER_LOG_FORMAT", "console").lower()
    copier_level = "DEBUG" if verbosity >= 3 else "INFO"

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    # --- structlog configure ---
    structlog.configure(
        processors=shared_processors
        + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    # --- stdlib logging configure ---
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structlog": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "foreign_pre_chain": shared_processors,
                    "processors": [
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        renderer,
                    ],
                },
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                    "formatter": "structlog",
                },
            },
            "root": {
                "handlers": ["default"],
                "level": log_level,
            },
            "loggers": {
                "lambda_bundler": {"level": log_level},
                "lambda_bundler.copier": {
                    "level": copier_level if log_level == "DEBUG" else log_level
                },
            },
        }
    )
