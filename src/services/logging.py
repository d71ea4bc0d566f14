"""
Logging - Application logging configuration and disk persistence.

Provides:
- Python logging configuration with console and optional file output
- Log persistence to daily files: meshid-YYYY-MM-DD.log
- Automatic cleanup of old log files
"""

from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional
import logging

from utils import get_logs_dir

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
LOG_FILE_PREFIX = "meshid-"


def configure_logging(level: int = logging.INFO, retention_days: int = 0,
                      logger: Optional[logging.Logger] = None) -> logging.Logger:
    """
    Configure Python logging for the application.

    Sets up console output on the root logger (or `logger`). When
    retention_days is positive, records are also written to today's log
    file and files older than the retention window are removed.

    Args:
        level: Logging level (default: INFO)
        retention_days: Days to keep log files on disk (0 = console only)
        logger: Logger to configure (default: root logger)

    Returns:
        The configured logger
    """
    target = logger or logging.getLogger()

    # Only configure once per logger
    if any(getattr(h, "_meshid_handler", False) for h in target.handlers):
        return target

    target.setLevel(level)

    # Console handler with simple format
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%H:%M:%S'))
    console_handler._meshid_handler = True
    target.addHandler(console_handler)

    if retention_days > 0:
        file_handler = logging.FileHandler(get_log_file_path(), encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        file_handler._meshid_handler = True
        target.addHandler(file_handler)
        cleanup_old_logs(retention_days)

    return target


def get_log_file_path(date: Optional[datetime] = None) -> Path:
    """Get the log file path for a specific date (defaults to today)."""
    if date is None:
        date = datetime.now()
    filename = f"{LOG_FILE_PREFIX}{date.strftime('%Y-%m-%d')}.log"
    return get_logs_dir() / filename


def cleanup_old_logs(retention_days: int) -> int:
    """
    Delete log files older than retention_days.

    Args:
        retention_days: Delete files older than this (0 = delete all)

    Returns:
        Number of files deleted
    """
    if retention_days < 0:
        return 0

    logs_dir = get_logs_dir()
    cutoff_date = datetime.now() - timedelta(days=retention_days)
    deleted_count = 0

    for file_path in logs_dir.glob(f"{LOG_FILE_PREFIX}*.log"):
        # Parse date from filename
        try:
            date_str = file_path.stem.replace(LOG_FILE_PREFIX, "")
            file_date = datetime.strptime(date_str, "%Y-%m-%d")

            if file_date < cutoff_date:
                file_path.unlink()
                deleted_count += 1
        except (ValueError, OSError):
            # Skip files that don't match expected format
            pass

    return deleted_count
