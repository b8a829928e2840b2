"""
Tests for formations/utils/logger.py.
"""

import logging
from unittest.mock import patch

import pytest

from formations.utils import logger as logger_module


@pytest.fixture
def fresh_logger():
    """Reset the singleton logger and its handlers around a test."""
    app_logger = logging.getLogger("formations")
    saved_handlers = list(app_logger.handlers)
    saved_instance = logger_module._logger_instance
    logger_module._logger_instance = None
    yield
    for handler in app_logger.handlers:
        if handler not in saved_handlers:
            handler.close()
    app_logger.handlers[:] = saved_handlers
    logger_module._logger_instance = saved_instance


def test_console_handler_only_by_default(fresh_logger):
    with patch.object(logger_module, "config", {"logging": {"level": "WARNING", "logs_dir": None}}):
        app_logger = logger_module.get_logger()

    assert app_logger.name == "formations"
    assert len(app_logger.handlers) == 1
    assert isinstance(app_logger.handlers[0], logging.StreamHandler)
    assert app_logger.handlers[0].level == logging.WARNING


def test_get_logger_is_singleton(fresh_logger):
    assert logger_module.get_logger() is logger_module.get_logger()


def test_file_handler_when_logs_dir_set(fresh_logger, tmp_path):
    logs_dir = tmp_path / "logs"
    settings = {"logging": {"level": "INFO", "logs_dir": str(logs_dir), "filename": "demo.log"}}

    with patch.object(logger_module, "config", settings):
        app_logger = logger_module.get_logger()

    file_handlers = [h for h in app_logger.handlers if isinstance(h, logging.FileHandler)]
    assert len(file_handlers) == 1
    assert (logs_dir / "demo.log").exists()

    logging.getLogger("formations.events.repository").info("hello from a child logger")
    file_handlers[0].flush()
    assert "hello from a child logger" in (logs_dir / "demo.log").read_text(encoding="utf-8")
