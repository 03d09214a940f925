"""
Logging configuration for the status line.

Standard output carries the rendered line, so log records never go there:
they go to a rotating file when one is configured and are discarded
otherwise.
"""

import logging
import logging.handlers
import os
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

import orjson


PACKAGE_LOGGER = "statusline"


class JSONFormatter(logging.Formatter):
    """JSON-lines formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
            'pid': os.getpid(),
        }

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        if hasattr(record, 'extra_data'):
            log_entry['extra'] = record.extra_data

        return orjson.dumps(log_entry, default=str).decode()


def setup_logging(
    level: str = "WARNING",
    log_file: Optional[Union[str, Path]] = None,
    json_format: bool = False,
    max_file_size: int = 1024 * 1024,  # 1MB
    backup_count: int = 3,
) -> logging.Logger:
    """
    Configure the package logger.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Log file path; None discards records
        json_format: Whether to use JSON formatting
        max_file_size: Maximum log file size in bytes
        backup_count: Number of rotated files to keep

    Returns:
        Configured package logger
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    package_logger.propagate = False

    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    if log_file is None:
        package_logger.addHandler(logging.NullHandler())
        return package_logger

    if json_format:
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(funcName)s:%(lineno)d - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    path = Path(log_file).expanduser()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            path,
            maxBytes=max_file_size,
            backupCount=backup_count,
            encoding='utf-8'
        )
    except OSError:
        # Unwritable log location: discard records
        package_logger.addHandler(logging.NullHandler())
        return package_logger

    file_handler.setFormatter(formatter)
    package_logger.addHandler(file_handler)
    return package_logger


def log_performance(logger: logging.Logger, operation: str, duration: float, **kwargs):
    """Log timing of an operation at DEBUG level."""
    extra_data = {
        'operation': operation,
        'duration_ms': round(duration * 1000, 2),
        **kwargs
    }
    logger.debug(f"Performance: {operation} took {duration:.3f}s", extra={'extra_data': extra_data})
