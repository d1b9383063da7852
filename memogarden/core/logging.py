"""Structured JSON logging configuration."""

import logging
import sys
from datetime import UTC, datetime
from typing import Any, Optional

from pythonjsonlogger.json import JsonFormatter

from memogarden.core.config import settings


def component_of(logger_name: str) -> str:
    """
    Subsystem a logger belongs to.

    ``memogarden.learning_engine.health.service`` -> ``health``,
    ``memogarden.api.v1.endpoints.cards`` -> ``api``. Third-party loggers keep
    their top-level package name.
    """
    parts = logger_name.split(".")
    if parts[0] != "memogarden" or len(parts) < 2:
        return parts[0]
    if parts[1] == "learning_engine" and len(parts) > 2:
        return parts[2]
    return parts[1]


class ServiceJsonFormatter(JsonFormatter):
    """One JSON object per record, UTC timestamps, tagged with the emitting subsystem."""

    def add_fields(
        self, log_record: dict[str, Any], record: logging.LogRecord, message_dict: dict[str, Any]
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = datetime.fromtimestamp(record.created, UTC).isoformat()
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["component"] = component_of(record.name)
        log_record["function"] = record.funcName
        log_record.pop("asctime", None)


def setup_logging(level: Optional[str] = None) -> None:
    """Route every log record to stdout as JSON. Safe to call more than once."""
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO))
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(ServiceJsonFormatter("%(message)s"))
    root_logger.addHandler(console_handler)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    if not settings.DB_ECHO:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
