"""
Logging configuration.

Console output by default; set LOG_JSON=true to emit one JSON object per
record (for container log collectors).
"""

import logging
import logging.config
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from app.core.config import Settings


class BillingJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter that adds level, logger name and billing context fields."""

    def __init__(self, *args, environment: str = "development", **kwargs):
        super().__init__(*args, **kwargs)
        self.environment = environment

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]):
        super().add_fields(log_record, record, message_dict)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["environment"] = self.environment

        for field in ("hostel_id", "month", "year", "actor_id"):
            if hasattr(record, field):
                log_record[field] = getattr(record, field)


def build_logging_config(settings: Settings) -> Dict[str, Any]:
    formatter = "json" if settings.LOG_JSON else "standard"
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
            },
            "json": {
                "()": BillingJsonFormatter,
                "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
                "environment": settings.ENVIRONMENT,
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": formatter,
            },
        },
        "loggers": {
            "app": {
                "handlers": ["console"],
                "level": settings.LOG_LEVEL,
                "propagate": False,
            },
        },
        "root": {
            "handlers": ["console"],
            "level": "WARNING",
        },
    }


def configure_logging(settings: Settings) -> None:
    """Apply the logging configuration once at startup."""
    logging.config.dictConfig(build_logging_config(settings))
