"""
utils/logger.py
---------------
Logging setup shared by the database layer.
Every module obtains its logger through `get_logger(__name__)`; the first
call installs one stdout handler on the root logger at `config.LOG_LEVEL`.
"""

import logging
import sys

from config import LOG_LEVEL

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_handler: logging.Handler | None = None


def _resolve_level(name: str) -> int:
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level: str = LOG_LEVEL) -> logging.Handler:
    """
    Install the stdout handler on the root logger, or update its level.

    Args:
        level: Level name such as ``DEBUG`` or ``WARNING``; unknown names fall back to INFO.

    Returns:
        The handler owned by this module.
    """
    global _handler
    root = logging.getLogger()
    if _handler is None:
        _handler = logging.StreamHandler(sys.stdout)
        _handler.setFormatter(logging.Formatter(_LOG_FORMAT, _DATE_FORMAT))
        root.addHandler(_handler)
    root.setLevel(_resolve_level(level.upper()))
    return _handler


def get_logger(name: str) -> logging.Logger:
    """Named logger; configures the root logger on first use."""
    if _handler is None:
        configure_logging()
    return logging.getLogger(name)
