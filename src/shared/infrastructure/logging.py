"""
Structured Logging
==================

JSON-structured logging with correlation ID tracking.

Provides:
- Structured JSON logs (parseable by log aggregators)
- Correlation ID for request tracing
- Contextual loggers for modules

Usage:
    from shared.infrastructure.logging import get_logger

    logger = get_logger(__name__)
    logger.warning("Calendar fallback", extra={"field": "slaTimezone"})
"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Optional

from pythonjsonlogger.json import JsonFormatter

from config import get_settings


class CustomJsonFormatter(JsonFormatter):
    """
    Custom JSON formatter with additional fields.

    Adds:
    - timestamp in ISO format
    - correlation_id when available
    - Environment info
    """

    def __init__(self, *args: Any, environment: str = "unknown", **kwargs: Any):
        self.environment = environment
        super().__init__(*args, **kwargs)

    def add_fields(
        self,
        log_data: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_data, record, message_dict)

        if not log_data.get("timestamp"):
            log_data["timestamp"] = datetime.now(timezone.utc).isoformat()

        if hasattr(record, "correlation_id"):
            log_data["correlation_id"] = record.correlation_id
        elif "correlation_id" in message_dict:
            log_data["correlation_id"] = message_dict["correlation_id"]

        log_data["environment"] = getattr(record, "environment", self.environment)

        # Sanitize any sensitive data
        for key, value in list(log_data.items()):
            if isinstance(value, str):
                lowered = key.lower()
                if "password" in lowered or "api_key" in lowered:
                    log_data[key] = "***REDACTED***"
                elif "token" in lowered:
                    log_data[key] = "***REDACTED***"


def setup_logging(
    level: Optional[str] = None,
    environment: Optional[str] = None,
) -> None:
    """
    Configure structured JSON logging for the application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR), defaults to settings
        environment: Environment name for log context, defaults to settings
    """
    settings = get_settings()
    level = level or settings.log_level
    environment = environment or settings.environment

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(getattr(logging, level.upper()))

    formatter = CustomJsonFormatter(
        "%(asctime)s %(name)s %(levelname)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        environment=environment,
    )

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    # Silence noisy loggers
    logging.getLogger("watchdog").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the given name.

    Args:
        name: Logger name (typically __name__ of the module)

    Returns:
        logging.Logger: Configured logger instance
    """
    return logging.getLogger(name)

