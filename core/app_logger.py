# core/app_logger.py

"""
Program-wide logging setup.

Modules obtain their own logger with `logging.getLogger(__name__)`; entry points call `setup_logging()` once.
"""

import logging

from core.config import Config

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: str | None = None) -> logging.Logger:
    level_name = (level or Config.log_level()).upper()
    numeric_level = getattr(logging, level_name, logging.INFO)

    # configure root once
    logging.basicConfig(level=numeric_level, format=LOG_FORMAT)

    logger = logging.getLogger()
    logger.setLevel(numeric_level)
    return logger
