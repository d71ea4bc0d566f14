import logging
from datetime import datetime, timedelta

from services import cleanup_old_logs, configure_logging, get_log_file_path
from utils import (
    get_app_dir,
    get_database_path,
    get_logs_dir,
    get_secure_storage_path,
    load_settings,
)


def test_paths_follow_app_home(app_home):
    assert get_app_dir() == app_home
    assert get_secure_storage_path().parent == app_home
    assert get_database_path().parent == app_home
    assert get_logs_dir() == app_home / "logs"
    assert get_logs_dir().is_dir()


def test_settings_missing(app_home):
    assert load_settings() == {}


def test_settings_loaded(app_home):
    (app_home / "settings.json").write_text('{"kdf": {"time_cost": 2}}')
    assert load_settings() == {"kdf": {"time_cost": 2}}


def test_settings_broken(app_home, caplog):
    (app_home / "settings.json").write_text("{not json")
    with caplog.at_level(logging.WARNING):
        assert load_settings() == {}
    assert "Failed to load settings" in caplog.text


def test_configure_logging_console_only(app_home):
    logger = logging.getLogger("meshid-test-console")
    try:
        configure_logging(logging.DEBUG, logger=logger)
        configure_logging(logging.DEBUG, logger=logger)
        assert len(logger.handlers) == 1
        assert logger.level == logging.DEBUG
    finally:
        logger.handlers.clear()


def test_configure_logging_writes_daily_file(app_home):
    logger = logging.getLogger("meshid-test-file")
    try:
        configure_logging(logging.INFO, retention_days=7, logger=logger)
        logger.info("Stored private key for 0xabc")
        for handler in logger.handlers:
            handler.flush()
        assert "Stored private key for 0xabc" in get_log_file_path().read_text()
    finally:
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()


def test_cleanup_old_logs(app_home):
    old = get_log_file_path(datetime.now() - timedelta(days=10))
    recent = get_log_file_path(datetime.now() - timedelta(days=1))
    stray = get_logs_dir() / "meshid-notadate.log"
    for path in (old, recent, stray):
        path.write_text("x")

    assert cleanup_old_logs(5) == 1
    assert not old.exists()
    assert recent.exists()
    assert stray.exists()
    assert cleanup_old_logs(-1) == 0
