"""
crudgen Logging Utilities

Simple logging setup using Python's standard logging library.

User-facing output is printed with click; logging is for diagnostics and
stays quiet unless --verbose or CRUDGEN_LOG_LEVEL asks for more.

Usage:
    from crudgen.logging import get_logger

    logger = get_logger(__name__)
    logger.debug("Patched %s", path)
"""

import logging
import sys
from typing import Optional

ROOT_LOGGER_NAME = "crudgen"

DEFAULT_FORMAT = '[%(asctime)s] %(levelname)-8s | %(name)s - %(message)s'
DEFAULT_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """
    Get a logger inside the crudgen hierarchy.

    Names outside the package (e.g. a bare "scaffold") are nested under
    "crudgen" so setup_logging() controls them too.
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def setup_logging(
    level: str = "WARNING",
    format_string: Optional[str] = None,
    date_format: Optional[str] = None
) -> logging.Logger:
    """
    Configure the crudgen logger hierarchy.

    Only the package logger is touched, not the root logger, so embedding
    applications and pytest keep their own configuration. Calling it again
    replaces the previous handler.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_string: Custom log format
        date_format: Custom date format

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)

    for handler in list(logger.handlers):
        if getattr(handler, "_crudgen_handler", False):
            logger.removeHandler(handler)

    # stderr keeps generated-file reports on stdout clean
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(
        format_string or DEFAULT_FORMAT,
        datefmt=date_format or DEFAULT_DATE_FORMAT
    ))
    handler._crudgen_handler = True
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper()))

    return logger
