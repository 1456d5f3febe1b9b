# 📄 File: plantscan/shared/utils/logging.py

# 🧭 Purpose (Layman Explanation):
# This file sets up a logging system that records what happens in the app in a structured way,
# so we can see when cached plant data was used, when storage failed and who was scanning.

# 🧪 Purpose (Technical Summary):
# Implements structured logging with JSON formatting, contextual information (current user),
# and cache/storage operation events for observability of the offline data layer.

# 🔗 Dependencies:
# - python-json-logger: JSON log formatting
# - logging: Python standard logging
# - contextvars: User context tracking
# - datetime: Timestamp handling

# 🔄 Connected Modules / Calls From:
# Used by: cache store (hit/miss/evict events), domain repositories, application services

import logging
import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from pythonjsonlogger.json import JsonFormatter

from plantscan.shared.config.settings import get_settings

# Context variables for user tracking
user_id_var: ContextVar[str] = ContextVar('user_id', default='')
session_id_var: ContextVar[str] = ContextVar('session_id', default='')

# Global logging configuration
_logging_configured = False
_loggers_cache: Dict[str, "StructuredLogger"] = {}

SERVICE_NAME = 'plantscan'


def _hostname() -> str:
    return os.uname().nodename if hasattr(os, 'uname') else 'unknown'


class ContextualFormatter(logging.Formatter):
    """
    Custom formatter that adds contextual information to log records.

    Adds user ID, session ID, host and service name to every log message.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.hostname = _hostname()
        self.service_name = SERVICE_NAME

    def format(self, record):
        record.user_id = user_id_var.get('')
        record.session_id = session_id_var.get('')
        record.hostname = self.hostname
        record.service = self.service_name
        record.timestamp = datetime.now(timezone.utc).isoformat()

        if hasattr(record, 'extra_fields') and record.extra_fields:
            for key, value in record.extra_fields.items():
                setattr(record, key, value)

        return super().format(record)


class JSONFormatter(JsonFormatter):
    """
    JSON formatter for structured logging.

    Outputs logs in JSON format with consistent structure for
    log aggregation and analysis tools.
    """

    def __init__(self):
        super().__init__(json_ensure_ascii=False)
        self.hostname = _hostname()
        self.service_name = SERVICE_NAME

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)

        log_record['timestamp'] = datetime.now(timezone.utc).isoformat()
        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['module'] = record.module
        log_record['function'] = record.funcName
        log_record['line'] = record.lineno
        log_record['service'] = self.service_name
        log_record['hostname'] = self.hostname

        if user_id_var.get():
            log_record['user_id'] = user_id_var.get()
        if session_id_var.get():
            log_record['session_id'] = session_id_var.get()

        # extra_fields arrive flattened by the base class; nest them instead
        extra_fields = log_record.pop('extra_fields', None)
        if extra_fields:
            log_record['extra'] = extra_fields


class PerformanceLogger:
    """
    Logger for cache and storage operation events.
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def log_cache_operation(
        self,
        operation: str,
        key: str,
        hit: Optional[bool] = None,
        age_hours: Optional[float] = None,
        extra: Optional[Dict[str, Any]] = None
    ):
        """Log cache operation (save, load, stale, evict, clear)."""
        extra_fields = {
            'event_type': 'cache_operation',
            'operation': operation,
            'cache_key': key,
            **(extra or {})
        }

        if hit is not None:
            extra_fields['cache_hit'] = hit
        if age_hours is not None:
            extra_fields['age_hours'] = round(age_hours, 2)

        self.logger.debug(
            f"Cache {operation} - {key}",
            extra={'extra_fields': extra_fields}
        )

    def log_storage_failure(
        self,
        operation: str,
        key: Optional[str],
        error: Exception,
        extra: Optional[Dict[str, Any]] = None
    ):
        """Log a swallowed storage failure."""
        extra_fields = {
            'event_type': 'storage_failure',
            'operation': operation,
            'error': str(error),
            'error_type': type(error).__name__,
            **(extra or {})
        }
        if key:
            extra_fields['cache_key'] = key

        self.logger.error(
            f"Storage {operation} failed for {key or '<all>'}: {error}",
            extra={'extra_fields': extra_fields}
        )


class StructuredLogger:
    """
    Enhanced logger with structured logging capabilities.

    Provides methods for logging different types of events with
    consistent structure and contextual information.
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)
        self.performance = PerformanceLogger(self.logger)

    def debug(self, message: str, extra: Dict = None, **kwargs):
        """Log debug message with extra fields."""
        self._log(logging.DEBUG, message, extra, **kwargs)

    def info(self, message: str, extra: Dict = None, **kwargs):
        """Log info message with extra fields."""
        self._log(logging.INFO, message, extra, **kwargs)

    def warning(self, message: str, extra: Dict = None, **kwargs):
        """Log warning message with extra fields."""
        self._log(logging.WARNING, message, extra, **kwargs)

    def error(self, message: str, extra: Dict = None, exc_info: bool = False, **kwargs):
        """Log error message with extra fields."""
        self._log(logging.ERROR, message, extra, exc_info=exc_info, **kwargs)

    def _log(self, level: int, message: str, extra: Dict = None, **kwargs):
        """Internal log method with extra fields handling."""
        extra_fields = dict(extra or {})

        for key, value in kwargs.items():
            if key not in ['exc_info', 'stack_info', 'stacklevel']:
                extra_fields[key] = value

        clean_kwargs = {k: v for k, v in kwargs.items()
                        if k in ['exc_info', 'stack_info', 'stacklevel']}

        if extra_fields:
            clean_kwargs['extra'] = {'extra_fields': extra_fields}

        self.logger.log(level, message, **clean_kwargs)

    def log_user_action(
        self,
        action: str,
        user_id: str,
        resource: str = None,
        result: str = 'success',
        extra: Dict = None
    ):
        """Log user action for audit trail."""
        extra_fields = {
            'event_type': 'user_action',
            'action': action,
            'user_id': user_id,
            'result': result,
            **(extra or {})
        }

        if resource:
            extra_fields['resource'] = resource

        self.info(
            f"User {user_id} performed {action}" +
            (f" on {resource}" if resource else ""),
            extra=extra_fields
        )


def setup_logging(
    log_level: str = None,
    log_format: str = None,
    log_file: str = None,
    enable_console: bool = True
) -> logging.Logger:
    """
    Setup application logging configuration.

    Args:
        log_level: Logging level, defaults to settings.LOG_LEVEL
        log_format: 'json' or 'text', defaults to settings.LOG_FORMAT
        log_file: Optional file path, defaults to settings.LOG_FILE
        enable_console: Whether to log to stdout

    Returns:
        The startup logger
    """
    global _logging_configured

    if _logging_configured:
        return logging.getLogger("startup")

    settings = get_settings()
    log_level = log_level or settings.LOG_LEVEL
    log_format = log_format or settings.LOG_FORMAT
    log_file = log_file or settings.LOG_FILE

    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    if log_format.lower() == 'json':
        formatter = JSONFormatter()
    else:
        formatter = ContextualFormatter('%(timestamp)s - %(name)s - %(levelname)s - %(message)s')

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if enable_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    logging.getLogger('redis').setLevel(logging.WARNING)
    logging.getLogger('asyncio').setLevel(logging.WARNING)

    _logging_configured = True
    return logging.getLogger("startup")


def get_logger(name: str) -> StructuredLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        StructuredLogger instance
    """
    if name in _loggers_cache:
        return _loggers_cache[name]

    logger = StructuredLogger(name)
    _loggers_cache[name] = logger

    return logger


@contextmanager
def log_context(user_id: str = None, session_id: str = None):
    """
    Context manager for adding the acting user to every log record.

    Args:
        user_id: Signed-in user identifier (empty for guests)
        session_id: Optional app session identifier
    """
    user_token = user_id_var.set(user_id or '')
    session_token = session_id_var.set(session_id or '')

    try:
        yield {'user_id': user_id, 'session_id': session_id}
    finally:
        user_id_var.reset(user_token)
        session_id_var.reset(session_token)
