import logging
import logging.config
import os
import sys
import time
import uuid
from datetime import datetime, timezone
from typing import Optional

import structlog

_SHARED_PROCESSORS = [
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="iso", utc=True),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.UnicodeDecoder(),
]


def configure_logging(log_level: str = "INFO", log_file: Optional[str] = None, json_console: bool = True):
    """
    Configure structured logging for the scheduler.

    structlog events are handed to the stdlib logging tree so Flask, SQLAlchemy
    and APScheduler records share the same handlers.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional log file path, rotated at 10MB. Stdout only if None.
        json_console: Render console lines as JSON; key=value text otherwise
    """
    structlog.configure(
        processors=[structlog.stdlib.filter_by_level]
        + _SHARED_PROCESSORS
        + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    console_renderer = (
        structlog.processors.JSONRenderer()
        if json_console
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    handlers = ["console"]
    log_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {
                "()": structlog.stdlib.ProcessorFormatter,
                "processor": console_renderer,
                "foreign_pre_chain": _SHARED_PROCESSORS,
            },
            "json": {
                "()": structlog.stdlib.ProcessorFormatter,
                "processor": structlog.processors.JSONRenderer(),
                "foreign_pre_chain": _SHARED_PROCESSORS,
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": log_level,
                "formatter": "console",
                "stream": sys.stdout,
            }
        },
        "loggers": {
            "": {"level": log_level, "handlers": handlers, "propagate": False},
            # APScheduler logs every tick at INFO
            "apscheduler": {"level": "WARNING", "handlers": handlers, "propagate": False},
        },
    }

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        log_config["handlers"]["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": log_level,
            "formatter": "json",
            "filename": log_file,
            "maxBytes": 10485760,  # 10MB
            "backupCount": 5,
        }
        handlers.append("file")

    logging.config.dictConfig(log_config)

    logger = structlog.get_logger("talentflow")
    logger.info("Logging configured", level=log_level, file=log_file)
    return logger


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


class OperationContext:
    """
    Log start, completion and failure of a named operation.

    Every line carries the operation type, a short correlation id and any
    extra context passed in (tenant id, holiday date, ...).

        with OperationContext("holiday_cascade", tenant_id=tenant_id):
            ...
    """

    def __init__(self, operation_type: str, operation_id: Optional[str] = None, **context):
        self.operation_type = operation_type
        self.operation_id = operation_id or uuid.uuid4().hex[:8]
        self.logger = get_logger("talentflow.operations").bind(
            operation_type=operation_type,
            operation_id=self.operation_id,
            **context
        )
        self._started = None

    @property
    def elapsed(self) -> float:
        return round(time.monotonic() - self._started, 3) if self._started is not None else 0.0

    def __enter__(self):
        self._started = time.monotonic()
        self.logger.info("Operation started", start_time=datetime.now(timezone.utc).isoformat())
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.logger.info("Operation completed", duration_seconds=self.elapsed, status="success")
        else:
            self.logger.error(
                "Operation failed",
                duration_seconds=self.elapsed,
                status="error",
                error_type=exc_type.__name__,
                error_message=str(exc_val),
            )
        return False
