"""Tests for logging setup."""

import logging

import pytest

from ops_dashboard.logging_config import DEFAULT_FORMAT, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_console_only(self, restore_root_logger):
        logger = setup_logging(level=logging.DEBUG)

        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert logger.handlers[0].formatter._fmt == DEFAULT_FORMAT

    def test_rotating_file_handler(self, restore_root_logger, tmp_path):
        log_file = tmp_path / "logs" / "dashboard.log"

        logger = setup_logging(log_file=str(log_file))
        logging.getLogger("ops_dashboard.test").info("Transaction TXN-001 cleared")
        for handler in logger.handlers:
            handler.flush()

        assert len(logger.handlers) == 2
        assert "Transaction TXN-001 cleared" in log_file.read_text(encoding="utf-8")

    def test_repeated_setup_does_not_duplicate_handlers(self, restore_root_logger):
        setup_logging()
        logger = setup_logging()

        assert len(logger.handlers) == 1
