"""Logging setup shared by the converter, the optimizer client and the CLI."""

import os
import sys
import logging
from typing import Dict, Optional

DEFAULT_LOGGER_NAME = "image-converter"

# (format, datefmt) per LOG_FORMAT value
_FORMATS: Dict[str, tuple] = {
    "structured": (
        "%(asctime)s | %(name)s | %(levelname)-8s | "
        "%(filename)s:%(lineno)d | %(funcName)s() | %(message)s",
        "%Y-%m-%d %H:%M:%S",
    ),
    "simple": ("%(asctime)s - %(name)s - %(levelname)s - %(message)s", None),
}


def _resolve_level(level: Optional[str]) -> int:
    name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    return getattr(logging, name, logging.INFO)


def setup_logger(
    name: str = DEFAULT_LOGGER_NAME,
    level: Optional[str] = None,
    format_type: str = "structured",
) -> logging.Logger:
    """
    Configure a named logger writing to stdout.

    Args:
        name: Logger name
        level: Level override; LOG_LEVEL or INFO when omitted
        format_type: "structured" or "simple"; LOG_FORMAT wins when set

    Returns:
        The configured logger. Calling again for the same name only updates
        its level.
    """
    logger = logging.getLogger(name)
    logger.setLevel(_resolve_level(level))

    if not logger.handlers:
        format_name = os.getenv("LOG_FORMAT", format_type).lower()
        fmt, datefmt = _FORMATS.get(format_name, _FORMATS["simple"])
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
        logger.addHandler(handler)

    logger.propagate = False
    return logger


def get_logger(name: str = DEFAULT_LOGGER_NAME) -> logging.Logger:
    return setup_logger(name)


def set_debug_logging(name: str = DEFAULT_LOGGER_NAME) -> None:
    """Switch a configured logger (and its handlers) to DEBUG."""
    logger = setup_logger(name, level="DEBUG")
    for handler in logger.handlers:
        handler.setLevel(logging.DEBUG)
