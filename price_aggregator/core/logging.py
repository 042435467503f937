import json
import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Optional

from price_aggregator.core.config import get_settings

# Context variable for request tracking
correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


class CorrelationIdFilter(logging.Filter):
    """Injects the current correlation ID into every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = correlation_id.get()
        return True


class StructuredLogFormatter(logging.Formatter):
    """
    Custom formatter for structured JSON logs.

    Creates a JSON-formatted log entry with standardized fields like
    timestamp, log level, message, correlation ID, etc.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        corr_id = getattr(record, "correlation_id", None) or correlation_id.get()
        if corr_id:
            log_data["correlation_id"] = corr_id

        vendor = getattr(record, "vendor", None)
        if vendor:
            log_data["vendor"] = vendor

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info)
            }

        # Add extra data if available
        if hasattr(record, "data") and isinstance(record.data, dict):
            log_data.update(record.data)

        return json.dumps(log_data, default=str)


def configure_logging() -> None:
    """
    Configure application-wide logging.

    Sets up structured JSON logging for production or formatted console
    logging for development, based on application settings.
    """
    settings = get_settings()
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    # Clear existing handlers
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    root_logger.setLevel(log_level)

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(CorrelationIdFilter())

    if settings.ENABLE_STRUCTURED_LOGGING:
        formatter = StructuredLogFormatter()
    else:
        formatter = logging.Formatter(
            "[%(asctime)s] [%(levelname)s] [%(name)s] [%(correlation_id)s] - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str, **extra: Any) -> logging.Logger:
    """
    Get a logger with the given name and extra context data.

    Args:
        name: Logger name, typically the module name
        **extra: Additional context data to include in log records

    Returns:
        logging.Logger: Configured logger instance
    """
    logger = logging.getLogger(name)
    if extra:
        class ExtraDataFilter(logging.Filter):
            def filter(self, record: logging.LogRecord) -> bool:
                record.data = extra
                return True

        logger.addFilter(ExtraDataFilter())
    return logger


def set_correlation_id(corr_id: Optional[str] = None) -> str:
    """
    Set the correlation ID for the current context.

    Args:
        corr_id: Correlation ID to set. If None, a new UUID is generated.

    Returns:
        str: The correlation ID that was set
    """
    corr_id = corr_id or str(uuid.uuid4())
    correlation_id.set(corr_id)
    return corr_id
