"""Logging helpers for the profit tracker.

Library modules call ``get_logger(__name__)`` and never attach handlers of
their own. Entrypoints (the CLI and the Flask app factory) call
``configure_logging`` once at startup.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO, Optional, Union

_PKG_LOGGER_NAME = "ledger"
_CONFIGURED = False


def _parse_level(level: Union[int, str, None]) -> int:
    if isinstance(level, int):
        return level
    if level is None:
        level = os.getenv("PROFIT_TRACKER_LOG_LEVEL", "INFO")
    numeric = getattr(logging, str(level).strip().upper(), None)
    if isinstance(numeric, int):
        return numeric
    return logging.INFO


def configure_logging(level: Union[int, str, None] = None, *, stream: IO[str] = sys.stderr) -> None:
    """Attach a single stream handler to the package logger exactly once."""
    global _CONFIGURED
    if _CONFIGURED:
        return

    handler = logging.StreamHandler(stream)
    handler.setFormatter(
        logging.Formatter(
            "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger = logging.getLogger(_PKG_LOGGER_NAME)
    logger.setLevel(_parse_level(level))
    logger.addHandler(handler)
    _CONFIGURED = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a module logger; a NullHandler keeps library use quiet."""
    logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not logger.handlers:
        logger.addHandler(logging.NullHandler())
    return logging.getLogger(name or _PKG_LOGGER_NAME)
