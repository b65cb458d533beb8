"""Unit tests for logging setup."""

import logging

import pytest
import structlog

from mockforge.core.config import Config
from mockforge.core.logging import SDK_LOGGERS, setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)
    for name in SDK_LOGGERS:
        logging.getLogger(name).setLevel(logging.NOTSET)


class TestSetupLogging:
    """Tests for logging configuration."""

    def test_sdk_loggers_held_at_warning(self):
        setup_logging(Config(log_level="INFO", json_logs=True))

        for name in SDK_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING

    def test_debug_lets_sdk_loggers_through(self):
        """Test DEBUG runs also surface the provider SDK logs."""
        setup_logging(Config(log_level="DEBUG", json_logs=False))

        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("openai").level == logging.DEBUG

