"""Logging setup for the converter.

Everything logs under the ``sieconverter`` namespace: parsers report each
dropped line at WARNING and a per-file summary at INFO, the upload route
logs every conversion and every rejected file.
"""

import logging
import sys

LOGGER_NAMESPACE = "sieconverter"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-45s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Attach a stdout handler to the ``sieconverter`` logger.

    Safe to call again (tests and reloads do): the level is updated but
    no second handler is added.

    Args:
        level: Level name from ``LOG_LEVEL``; unknown names fall back to INFO.

    Returns:
        The ``sieconverter`` namespace logger.
    """
    logger = logging.getLogger(LOGGER_NAMESPACE)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)

    # Uvicorn configures the root logger too; keep lines from printing twice
    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """Return ``sieconverter.<name>``, normally called with ``__name__``.

    Usage:
        from app.core.logging import get_logger
        logger = get_logger(__name__)
        logger.warning("Skipping CSV line %d: %s", line_num, reason)
    """
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")
