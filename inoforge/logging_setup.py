"""Logging configuration for inoforge processes."""

import logging

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach a stderr handler to the 'inoforge' logger, once."""
    logger = logging.getLogger("inoforge")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Avoid stacking handlers when the app factory runs more than once.
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)
    return logger
