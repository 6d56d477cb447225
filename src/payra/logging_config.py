"""
Logging configuration for Payra
"""

import logging
import sys
from typing import TextIO

LOG_FORMAT = "%(asctime)s - %(levelname)-8s %(name)s %(filename)s:%(lineno)d %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def resolve_level(level: int | str) -> int:
    """Accept a logging level as int or name ("debug", "INFO", ...)"""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")
    return resolved


def setup_logging(level: int | str = logging.INFO, stream: TextIO | None = None) -> None:
    """
    Configure root logging with timestamp, file and line number information.

    Existing root handlers are replaced so repeated calls (e.g. one per app
    factory invocation) do not duplicate output.

    Args:
        level: Logging level or level name (default: INFO)
        stream: Output stream (default: stdout)
    """
    numeric_level = resolve_level(level)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(stream or sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name (typically __name__)"""
    return logging.getLogger(name)
