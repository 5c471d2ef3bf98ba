"""
Unit tests for logging setup
"""

import logging

import pytest

from tor_bridge.utils.logging_setup import ROOT_LOGGER, get_logger, setup_logging


@pytest.fixture(autouse=True)
def clean_logger():
    yield
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


class TestSetupLogging:
    """Test cases for setup_logging"""

    def test_console_only(self):
        logger = setup_logging("warning")

        assert logger.name == ROOT_LOGGER
        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 1
        assert logger.handlers[0].level == logging.WARNING

    def test_reconfigure_replaces_handlers(self, tmp_path):
        """Test that a second call does not stack handlers"""
        setup_logging("INFO", log_file=str(tmp_path / "first.log"))
        logger = setup_logging("DEBUG")

        assert len(logger.handlers) == 1
        assert logger.level == logging.DEBUG

    def test_file_receives_debug_below_console_level(self, tmp_path):
        """Test that the rotating file keeps debug records the console drops"""
        log_file = tmp_path / "logs" / "tor.log"
        logger = setup_logging("INFO", log_file=str(log_file), max_bytes=1024, backup_count=2)

        get_logger("process_controller").debug("scanning process table")
        for handler in logger.handlers:
            handler.flush()

        content = log_file.read_text(encoding="utf-8")
        assert "[tor_bridge.process_controller] scanning process table" in content
        rotating = logger.handlers[1]
        assert rotating.maxBytes == 1024
        assert rotating.backupCount == 2

    def test_unknown_level_rejected(self):
        with pytest.raises(ValueError, match="Unknown log level"):
            setup_logging("LOUD")

    def test_http_loggers_quieted(self):
        setup_logging("DEBUG")

        assert logging.getLogger("urllib3").level == logging.WARNING
        assert logging.getLogger("requests").level == logging.WARNING


def test_get_logger_is_child_of_root():
    root = logging.getLogger(ROOT_LOGGER)
    child = get_logger("main")

    assert child.name == "tor_bridge.main"
    assert child.parent is root
