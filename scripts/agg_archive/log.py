"""
Logging setup for command-line use. Library modules only create loggers.
"""

import logging
import sys

from .archive.agg_file import OverrideUsed

LOGGER_NAME = "agg_archive"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

_handler = None


def setup_logging(level: str = "INFO") -> logging.Logger:
    """
    Attach a stream handler to the package logger and set its level.

    The handler is replaced when sys.stderr has changed since the last call.
    """
    global _handler
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if _handler is None or _handler.stream is not sys.stderr:
        if _handler is not None:
            logger.removeHandler(_handler)
        _handler = logging.StreamHandler(sys.stderr)
        _handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(_handler)

    return logger


def log_override_used(event: OverrideUsed) -> None:
    """Override listener that reports external assets through logging."""
    logging.getLogger(LOGGER_NAME).info(f"Using the external version of {event.name}")
