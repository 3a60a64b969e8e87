"""
Custom logging configuration.

Responsibilities:
- Setup the application logger
- Configure log level and format from settings
- Output logs to console
"""

import logging
import sys

from portfolio_upload.core.config import settings

LOGGER_NAME = "portfolio_upload"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logger(level: str = None) -> logging.Logger:
    """Configures the application logger."""
    app_logger = logging.getLogger(LOGGER_NAME)
    app_logger.setLevel((level or settings.LOG_LEVEL).upper())

    if not app_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        app_logger.addHandler(handler)

    return app_logger


logger = setup_logger()
