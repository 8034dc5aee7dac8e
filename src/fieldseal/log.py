"""
Logging setup for fieldseal.

Library modules only create module loggers; applications call
``configure_logging`` once at startup to attach a handler.
"""

import logging
import sys

from .config import FieldSealConfig


LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> logging.Logger:
    """
    Attach a stream handler to the ``fieldseal`` logger.

    Args:
        level: Log level name; defaults to the configured ``logging.level``

    Returns:
        The package logger
    """
    package_logger = logging.getLogger("fieldseal")
    package_logger.setLevel((level or FieldSealConfig.get_log_level()).upper())

    if not package_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        package_logger.addHandler(handler)

    return package_logger
