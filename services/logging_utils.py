"""
Centralized logging utilities with JSON formatting
"""

import json
import logging
import os
import sys
import time
from functools import wraps
from typing import Optional
from datetime import datetime, UTC


class JSONFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging"""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno
        }

        # Add exception info if present
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        # Add extra fields if present
        if hasattr(record, 'extra_data'):
            log_entry.update(record.extra_data)

        return json.dumps(log_entry, default=str)


def _default_level() -> int:
    level = logging.getLevelName(os.getenv("LOG_LEVEL", "INFO").upper())
    return level if isinstance(level, int) else logging.INFO


def get_logger(name: str) -> logging.Logger:
    """Get a logger with JSON formatting"""
    logger = logging.getLogger(name)

    # Avoid duplicate handlers
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)
        logger.setLevel(_default_level())
        logger.propagate = False

    return logger


class StructuredLogger:
    """Logger wrapper that turns keyword arguments into JSON fields"""

    def __init__(self, name: str):
        self.logger = get_logger(name)
        self.name = name

    def _log(self, level: int, message: str, exc_info: bool = False, **kwargs):
        extra = {"extra_data": kwargs} if kwargs else {}
        self.logger.log(level, message, extra=extra, exc_info=exc_info)

    def info(self, message: str, **kwargs):
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs):
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, exc_info: bool = False, **kwargs):
        self._log(logging.ERROR, message, exc_info=exc_info, **kwargs)

    def debug(self, message: str, **kwargs):
        self._log(logging.DEBUG, message, **kwargs)

    def performance(self, operation: str, duration: float, **metadata):
        """Log how long an operation took"""
        self.info(
            f"Performance: {operation} took {duration:.2f}s",
            operation=operation,
            duration=duration,
            **metadata
        )

    def analytics(self, metric: str, value: float, **metadata):
        """Log analytics data"""
        self.info(
            f"Analytics: {metric} = {value}",
            metric=metric,
            value=value,
            **metadata
        )


def get_structured_logger(name: str) -> StructuredLogger:
    """Get a structured logger instance"""
    return StructuredLogger(name)


def log_performance(logger_name: Optional[str] = None):
    """Decorator logging the duration of a coroutine function"""
    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            logger = get_structured_logger(logger_name or func.__module__)
            start_time = time.perf_counter()

            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                duration = time.perf_counter() - start_time
                logger.warning(
                    f"Performance: {func.__name__} failed after {duration:.2f}s: {e}",
                    function=func.__name__,
                    duration=duration,
                    success=False,
                    error=str(e),
                )
                raise

            logger.performance(func.__name__, time.perf_counter() - start_time, success=True)
            return result

        return wrapper
    return decorator
