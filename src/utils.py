"""
Shared utility functions for meshid.

Contains path helpers and settings loading used across packages.
"""

import os
import sys
import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

# Overrides the data directory (tests, portable installs)
APP_DIR_ENV = "MESHID_HOME"


def get_app_dir() -> Path:
    """Get the application data directory."""
    override = os.environ.get(APP_DIR_ENV)
    if override:
        app_dir = Path(override)
    elif getattr(sys, 'frozen', False):
        # Running as compiled
        app_dir = Path(sys.executable).parent / "data"
    else:
        # Running as script
        app_dir = Path(__file__).parent.parent / "data"

    app_dir.mkdir(parents=True, exist_ok=True)
    return app_dir


def get_secure_storage_path() -> Path:
    """Get path to the file-backed secure storage."""
    return get_app_dir() / "secure_storage.json"


def get_database_path() -> Path:
    """Get path to the profile database."""
    return get_app_dir() / "meshid.db"


def get_settings_path() -> Path:
    """Get path to settings file."""
    return get_app_dir() / "settings.json"


def get_logs_dir() -> Path:
    """Get the logs directory."""
    logs_dir = get_app_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    return logs_dir


def load_settings() -> dict:
    """Load settings from disk. Missing or unreadable files yield {}."""
    settings_path = get_settings_path()
    if settings_path.exists():
        try:
            with open(settings_path, 'r') as f:
                data = json.load(f)
            if isinstance(data, dict):
                return data
            logger.warning(f"Ignoring settings file, expected an object: {settings_path}")
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Failed to load settings: {e}")
    return {}
