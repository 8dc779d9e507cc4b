"""Structured Logger with JSON Formatting.

Provides structured logging with JSON output for machine-readable logs.
Every line carries the correlation ID of the request being served.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from portal_stats.lib.distributed_tracing import get_correlation_id

# Context fields copied from the log record into the JSON payload when present
CONTEXT_FIELDS = (
    'report_name',
    'interval',
    'group_id',
    'tab_id',
    'column_count',
    'row_count',
    'record_count',
    'duration_ms',
    'endpoint',
    'method',
    'status_code',
    'error_code',
)

SENSITIVE_KEYS = ('token', 'password', 'database_url', 'access_token')


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).strftime('%Y-%m-%dT%H:%M:%S.%f') + 'Z'


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON-formatted log string
        """
        log_data = {
            'timestamp': _utc_timestamp(),
            'level': record.levelname,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'request_id': get_correlation_id()
        }

        for field in CONTEXT_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        if record.exc_info:
            log_data['exception'] = {
                'type': record.exc_info[0].__name__ if record.exc_info[0] else None,
                'message': str(record.exc_info[1]) if record.exc_info[1] else None
            }

        return json.dumps(log_data, default=str)


PACKAGE_LOGGER = 'portal_stats'


def configure_logging(level: str = 'INFO') -> logging.Logger:
    """Set the level of the package logger and attach its JSON handler once.

    Every StructuredLogger is a child of the package logger and inherits
    both, so the level from settings applies to all of them.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        The package logger
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(level.upper())

    if not any(isinstance(h.formatter, JSONFormatter) for h in package_logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(JSONFormatter())
        package_logger.addHandler(handler)

    # Prevent propagation to avoid duplicate logs
    package_logger.propagate = False
    return package_logger


class StructuredLogger:
    """Structured logger with JSON formatting.

    Usage:
        logger = StructuredLogger(__name__)
        logger.info("Report built", report_name="tabRender.totals", row_count=30)
        logger.error("Store query failed", exc_info=True)
    """

    def __init__(self, name: str):
        """Initialize structured logger.

        Args:
            name: Logger name (typically module name, under the portal_stats package)
        """
        self.logger = logging.getLogger(name)

    def info(self, message: str, **extra: Any) -> None:
        """Log INFO level message.

        Args:
            message: Log message
            **extra: Additional context (report_name, row_count, etc.)
        """
        self.logger.info(message, extra=extra)

    def warning(self, message: str, exc_info: bool = False, **extra: Any) -> None:
        """Log WARNING level message."""
        self.logger.warning(message, exc_info=exc_info, extra=extra)

    def error(self, message: str, exc_info: bool = False, **extra: Any) -> None:
        """Log ERROR level message.

        Args:
            message: Log message
            exc_info: Include exception traceback
            **extra: Additional context
        """
        self.logger.error(message, exc_info=exc_info, extra=extra)

    def debug(self, message: str, **extra: Any) -> None:
        self.logger.debug(message, extra=extra)


def log_request(endpoint: str, method: str, status_code: int, duration_ms: float) -> None:
    """Log API request with performance metrics.

    Args:
        endpoint: API endpoint path
        method: HTTP method
        status_code: HTTP status code
        duration_ms: Request duration in milliseconds
    """
    log_data = {
        'timestamp': _utc_timestamp(),
        'level': 'INFO',
        'message': f'{method} {endpoint}',
        'request_id': get_correlation_id(),
        'endpoint': endpoint,
        'method': method,
        'status_code': status_code,
        'duration_ms': duration_ms
    }

    print(json.dumps(log_data))


def log_event(event: str, level: str = 'INFO', context: Optional[Dict[str, Any]] = None) -> None:
    """Event-based logging without creating a logger instance.

    Drops sensitive keys (passwords, connection strings) and includes the
    correlation ID.

    Args:
        event: Event name (e.g., "report.built", "service.initialized")
        level: Log level (INFO, WARNING, ERROR, DEBUG)
        context: Additional context dictionary

    Example:
        log_event("report.built", context={"report_name": "tabRender.totals", "row_count": 30})
    """
    log_entry = {
        'timestamp': _utc_timestamp(),
        'level': level.upper(),
        'event': event,
        'correlation_id': get_correlation_id(),
        **(context or {})
    }

    for key in SENSITIVE_KEYS:
        if key in log_entry:
            del log_entry[key]

    print(json.dumps(log_entry, default=str))


# Baseline until the application applies the configured LOG_LEVEL
configure_logging()
