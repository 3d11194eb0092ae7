"""
Structured JSON logging for Intake.

Uses python-json-logger so every record is a single machine-readable line.

Each record carries:
  - timestamp  : ISO 8601
  - level      : DEBUG / INFO / WARNING / ERROR / CRITICAL
  - logger     : logger name (e.g. "intake.documents", "uvicorn.error")
  - message    : the log message
  - service    : "intake" (static identifier for filtering)
  - environment: from the ENVIRONMENT variable (default: "production")
  - plus any extra fields passed with logger.info(..., extra={...})
"""

import logging
import logging.config
import os

from pythonjsonlogger.jsonlogger import JsonFormatter  # type: ignore[import-untyped]


class _IntakeJsonFormatter(JsonFormatter):
    """Adds static service/environment fields to every record."""

    _service = "intake"
    _environment = os.getenv("ENVIRONMENT", "production")

    def add_fields(
        self,
        log_record: dict,
        record: logging.LogRecord,
        message_dict: dict,
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["service"] = self._service
        log_record["environment"] = self._environment
        log_record["level"] = log_record.pop("levelname", record.levelname)
        log_record["logger"] = log_record.pop("name", record.name)


def setup_logging(level: str | None = None) -> None:
    """
    Configure the root logger and the uvicorn/intake loggers with JSON output.

    Called once at application startup. `level` defaults to LOG_LEVEL, else INFO.
    """
    log_level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "handlers": {
                "json": {
                    "class": "logging.StreamHandler",
                    "formatter": "json",
                    "stream": "ext://sys.stdout",
                },
            },
            "formatters": {
                "json": {
                    "()": _IntakeJsonFormatter,
                    "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s",
                    "datefmt": "%Y-%m-%dT%H:%M:%S",
                    "rename_fields": {"asctime": "timestamp"},
                },
            },
            "root": {
                "handlers": ["json"],
                "level": log_level,
            },
            "loggers": {
                "uvicorn": {"handlers": ["json"], "level": log_level, "propagate": False},
                "uvicorn.error": {"handlers": ["json"], "level": log_level, "propagate": False},
                "uvicorn.access": {"handlers": ["json"], "level": log_level, "propagate": False},
                "intake": {"handlers": ["json"], "level": log_level, "propagate": False},
            },
        }
    )
