"""Logging setup for duckquery."""

from __future__ import annotations

import logging
import re
import sys
from typing import Optional

from duckquery.config import get_settings

LOGGER_NAME = "duckquery"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_whitespace = re.compile(r"\s+")


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Attach one stderr handler to the package logger.

    Calling this again replaces the handler instead of stacking another one.

    Args:
        level: Log level name; defaults to the configured ``log_level``
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel((level or get_settings().log_level).upper())

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def format_sql_for_log(sql: str, max_chars: Optional[int] = None) -> str:
    """Collapse whitespace and truncate SQL for a single log line."""
    if max_chars is None:
        max_chars = get_settings().log_sql_max_chars
    normalized = _whitespace.sub(" ", sql).strip()
    if len(normalized) > max_chars:
        return normalized[:max_chars] + "..."
    return normalized
