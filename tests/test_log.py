"""
Tests for logging setup.
"""

import logging

import pytest

from fieldseal.log import configure_logging


@pytest.fixture
def package_logger():
    logger = logging.getLogger("fieldseal")
    handlers, level = list(logger.handlers), logger.level
    logger.handlers.clear()
    yield logger
    logger.handlers[:] = handlers
    logger.setLevel(level)


def test_configured_level(package_logger: logging.Logger, monkeypatch: pytest.MonkeyPatch) -> None:
    """Test that the configured level is applied."""
    from fieldseal.config import FieldSealConfig

    monkeypatch.setenv("FIELDSEAL_LOG_LEVEL", "warning")
    FieldSealConfig.initialize()

    assert configure_logging() is package_logger
    assert package_logger.level == logging.WARNING


def test_handler_added_once(package_logger: logging.Logger) -> None:
    """Test that repeated calls do not stack handlers."""
    configure_logging("debug")
    configure_logging("debug")

    assert len(package_logger.handlers) == 1
    assert package_logger.level == logging.DEBUG
