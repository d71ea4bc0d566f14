"""
Services package - Process-level services for meshid.

Contains:
- configure_logging: console and daily-file logging setup
- cleanup_old_logs: log retention
"""

from .logging import configure_logging, get_log_file_path, cleanup_old_logs

__all__ = [
    "configure_logging",
    "get_log_file_path",
    "cleanup_old_logs",
]
