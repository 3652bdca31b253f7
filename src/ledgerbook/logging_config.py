"""Logging setup shared by the CLI and embedding applications.

Usage:
    from ledgerbook.logging_config import setup_logging
    setup_logging(logging.DEBUG)
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Libraries whose INFO output drowns ledger messages
NOISY_LOGGERS = [
    "sqlalchemy.engine",
    "sqlalchemy.pool",
]


def setup_logging(level: int = logging.WARNING) -> logging.Logger:
    """Configure the ledgerbook logger with a console handler.

    Messages go to stderr so command output on stdout stays clean.
    Calling this again replaces the previous handler.

    Args:
        level: Minimum level emitted by ledgerbook modules

    Returns:
        The configured ``ledgerbook`` logger
    """
    logger = logging.getLogger("ledgerbook")
    logger.setLevel(level)
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    logger.debug("Logging initialised at %s", logging.getLevelName(level))
    return logger
