"""
Tests for logging setup
"""

import io
import logging

import pytest

from payra.logging_config import get_logger, resolve_level, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


@pytest.mark.parametrize(
    "level, expected",
    [(logging.DEBUG, logging.DEBUG), ("debug", logging.DEBUG), (" WARNING ", logging.WARNING)],
)
def test_resolve_level(level, expected):
    assert resolve_level(level) == expected


def test_resolve_unknown_level():
    with pytest.raises(ValueError):
        resolve_level("chatty")


def test_setup_logging_writes_formatted_records(restore_root_logger):
    stream = io.StringIO()
    setup_logging("debug", stream=stream)

    logging.getLogger("payra.test").debug("hello %s", "world")

    line = stream.getvalue()
    assert "DEBUG" in line
    assert "payra.test" in line
    assert "test_logging_config.py" in line
    assert line.rstrip().endswith("hello world")


def test_setup_logging_is_idempotent(restore_root_logger):
    setup_logging(stream=io.StringIO())
    setup_logging(stream=io.StringIO())

    assert len(restore_root_logger.handlers) == 1
    assert restore_root_logger.level == logging.INFO


def test_get_logger():
    assert get_logger("payra.services") is logging.getLogger("payra.services")
