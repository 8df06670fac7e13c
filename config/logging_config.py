"""
Centralized logging configuration.

Usage:
    from config.logging_config import get_logger
    logger = get_logger(__name__)
"""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from .settings import LOG_BACKUP_COUNT, LOG_FILE, LOG_FORMAT, LOG_LEVEL, LOG_MAX_SIZE_MB

ROOT_LOGGER_NAME = "akkord"


def setup_logger(name: str | None = None) -> logging.Logger:
    """
    Get or create a configured logger.

    Handlers are attached once to the shared ``akkord`` logger; module loggers are
    children of it and propagate, so repeated calls never add handlers.

    Args:
        name: Logger name (usually ``__name__``). If None, returns the root ``akkord`` logger.

    Returns:
        Configured logging.Logger instance.
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)

    if not root.handlers:
        root.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))

        console = logging.StreamHandler()
        console.setLevel(logging.INFO)
        console.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(console)

        if LOG_FILE:
            log_path = Path(LOG_FILE)
            log_path.parent.mkdir(parents=True, exist_ok=True)

            file_handler = logging.handlers.RotatingFileHandler(
                log_path,
                maxBytes=LOG_MAX_SIZE_MB * 1024 * 1024,
                backupCount=LOG_BACKUP_COUNT,
                encoding="utf-8",
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
            root.addHandler(file_handler)

    if not name or name == ROOT_LOGGER_NAME:
        return root
    return root.getChild(name)


def get_logger(name: str | None = None) -> logging.Logger:
    """Alias for setup_logger for convenience."""
    return setup_logger(name)
