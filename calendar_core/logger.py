"""
Logging setup for calendar_core.

Modules log through logging.getLogger(__name__). The package itself only
installs a NullHandler; applications call setup_logger() to get output on
stderr in the `[HH:MM:SS] name: message` layout.
"""

import logging
import sys


PACKAGE_LOGGER = "calendar_core"


def setup_logger(level: int = logging.INFO, name: str = PACKAGE_LOGGER) -> logging.Logger:
    """
    Configure and return the package logger.

    Args:
        level: Logging level (default: INFO)
        name: Logger name

    Returns:
        Configured logger instance. Calling this again only updates the
        level; it never adds a second stderr handler.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    for handler in logger.handlers:
        if getattr(handler, '_calendar_core_stderr', False):
            handler.setLevel(level)
            return logger

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(
        '[%(asctime)s] %(name)s: %(message)s',
        datefmt='%H:%M:%S'
    ))
    handler._calendar_core_stderr = True
    logger.addHandler(handler)
    return logger
