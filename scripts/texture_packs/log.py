"""
Logging setup for the texture pack filters.
"""

import logging
from typing import Union

LOGGER_NAME = "texture_packs"


def setup_logging(level: Union[int, str] = logging.INFO) -> logging.Logger:
    """Set up the package logger with a stream handler if none is attached."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
