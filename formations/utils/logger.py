"""
logger.py

Configures the application logger using Python's standard `logging` module.

`get_logger` returns the 'formations' logger, configured on first access with:

1.  Stream Handler (stdout), level from `config["logging"]["level"]`.
2.  File Handler, only when `config["logging"]["logs_dir"]` is set. Writes
    `<logs_dir>/<filename>` at INFO and above with a detailed format.

Library modules log through `logging.getLogger(__name__)`; being children of
'formations', their records reach these handlers too.
"""

import logging
import sys
from pathlib import Path

from formations.config import config

_logger_instance = None
_APP_LOGGER_NAME = "formations"


def _setup_logger() -> logging.Logger:
    """
    Configure and return the singleton application logger.

    Clears existing handlers before adding its own so repeated setup does not
    duplicate output. File logging problems are reported on the console
    handler and leave console logging in place.
    """
    global _logger_instance
    if _logger_instance:
        return _logger_instance

    logging_config = config.get("logging", {})
    level = getattr(logging, logging_config.get("level", "INFO"))

    logger = logging.getLogger(_APP_LOGGER_NAME)
    logger.setLevel(logging.DEBUG)

    if logger.hasHandlers():
        logger.handlers.clear()

    file_formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d - %(message)s"
    )
    console_formatter = logging.Formatter("%(asctime)s | %(levelname)-8s | %(message)s", datefmt="%H:%M:%S")

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    logs_dir = logging_config.get("logs_dir")
    if logs_dir:
        try:
            log_dir = Path(logs_dir)
            log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_dir / logging_config.get("filename", "formations.log"), encoding="utf-8")
            file_handler.setLevel(logging.INFO)
            file_handler.setFormatter(file_formatter)
            logger.addHandler(file_handler)
        except OSError as e:
            logger.error(f"Failed to create log directory or file at '{logs_dir}': {e}. File logging disabled.")

    _logger_instance = logger
    return _logger_instance


def get_logger() -> logging.Logger:
    """Return the application's configured logger instance."""
    return _setup_logger()
