"""
Category-aware logging utility for livechat

Logs can be filtered by category (bootstrap, chat, http, poller, system)
and by log level (DEBUG, INFO, WARN, ERROR).

Usage:
    from livechat.utils.logging import get_logger

    logger = get_logger(__name__, category='poller')
    logger.info('Polling started')
"""

import logging
from typing import Optional
from livechat.config import settings


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Log level hierarchy (lower number = more verbose)
LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# If LOG_CATEGORIES is not set, every category is shown
_allowed_categories = None
if settings.log_categories:
    _allowed_categories = [
        cat.strip().lower() for cat in settings.log_categories.split(",")
    ]


class CategoryFilter(logging.Filter):
    """Filter logs by category if LOG_CATEGORIES is set."""

    def __init__(self, category: Optional[str] = None):
        super().__init__()
        self.category = category.lower() if category else "system"

    def filter(self, record: logging.LogRecord) -> bool:
        if _allowed_categories is None:
            return True

        return self.category in _allowed_categories


def get_logger(name: str, category: Optional[str] = None) -> logging.Logger:
    """
    Get a logger with category filtering support.

    Args:
        name: Logger name (typically __name__)
        category: Category for filtering (e.g., 'bootstrap', 'poller', 'http')
                  If None, defaults to 'system'

    Returns:
        Logger instance with category filter applied
    """
    logger = logging.getLogger(name)

    log_level_str = settings.log_level.upper()
    log_level = LOG_LEVELS.get(log_level_str, logging.INFO)
    logger.setLevel(log_level)

    # Replace any previous category filter rather than stacking them
    logger.filters = [f for f in logger.filters if not isinstance(f, CategoryFilter)]
    logger.addFilter(CategoryFilter(category))

    return logger


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure root logging for a process running the poller.

    Args:
        level: Log level name (defaults to settings.log_level). Unknown
               names fall back to INFO.
    """
    level_name = (level or settings.log_level).upper()
    logging.basicConfig(
        level=LOG_LEVELS.get(level_name, logging.INFO),
        format=LOG_FORMAT,
    )
