"""Logging configuration.

One stdout handler on the root logger; modules log through
``logging.getLogger(__name__)``.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Chatty HTTP client libraries used by openai and qdrant-client
NOISY_LOGGERS = ("httpx", "httpcore", "urllib3")


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger with a single timestamped stdout handler.

    Calling it twice replaces the handler instead of duplicating output.
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    root_logger.setLevel(level.upper())
    root_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger (usually ``__name__``)."""
    return logging.getLogger(name)
