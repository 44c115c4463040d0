"""Logging configuration for SvcSeek.

Provides a centralized logging setup with:
- Default WARNING level (silent under normal operation)
- Debug via --verbose or the SVCSEEK_DEBUG environment variable
- Stderr output only (no file handlers)
- Safe for library imports (NullHandler fallback)
"""

import logging
import os
import sys

# Named logger for the whole toolkit
SVCSEEK_LOGGER_NAME = "svcseek"


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Configure toolkit logging. Call once at startup.

    Safe to call multiple times (idempotent).
    Returns the root toolkit logger.
    """
    logger = logging.getLogger(SVCSEEK_LOGGER_NAME)

    level = logging.WARNING
    if verbose or os.getenv("SVCSEEK_DEBUG"):
        level = logging.DEBUG

    logger.setLevel(level)

    # Avoid duplicate handlers on re-entry/tests
    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S"
    ))
    logger.addHandler(handler)

    # Quiet noisy third-party loggers
    logging.getLogger("impacket").setLevel(logging.WARNING)
    logging.getLogger("ldap3").setLevel(logging.WARNING)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a child logger under the svcseek namespace.

    If setup_logging() hasn't been called, returns a logger
    with NullHandler (safe for library imports).

    Args:
        name: Module name (typically __name__ or a descriptive string)

    Returns:
        A logger instance under the svcseek namespace
    """
    logger = logging.getLogger(f"{SVCSEEK_LOGGER_NAME}.{name}")
    if not logger.handlers and not logging.getLogger(SVCSEEK_LOGGER_NAME).handlers:
        logger.addHandler(logging.NullHandler())
    return logger
