"""
Logging configuration.

Modules log through ``logging.getLogger(__name__)``; the ``mealboard``
package logger configured here owns the handler, so every child logger
propagates to a single stdout stream.
"""
import logging
import sys
from typing import Optional

from mealboard.config import get_settings

settings = get_settings()

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(name: str = "mealboard", level: Optional[int] = None) -> logging.Logger:
    """Get a configured logger instance"""
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    if level is None:
        level = logging.DEBUG if settings.DEBUG else logging.INFO
    logger.setLevel(level)

    # openpyxl warns about every unsupported style extension it meets
    logging.getLogger("openpyxl").setLevel(logging.ERROR)
    return logger
