"""Logging configuration for the ``swedbank_ynab`` package.

Public helpers:

- ``configure_logging(...)``: install one ``StreamHandler`` on the package
  logger (``"swedbank_ynab"``). Entrypoints (the CLI) call this once; repeated
  calls only adjust the level.
- ``get_logger(name)``: return a module logger. Until an application
  configures logging, the package logger carries a ``NullHandler`` so library
  use stays silent.
- ``resolve_level(...)``: map ``--verbose`` counts, level names or the
  ``SWEDBANK_YNAB_LOG_LEVEL`` environment variable to a numeric level.

Library modules only ever call ``get_logger("swedbank_ynab.<module>")``.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

PACKAGE_LOGGER = "swedbank_ynab"
LOG_LEVEL_ENV = "SWEDBANK_YNAB_LOG_LEVEL"
DEFAULT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

_handler: logging.Handler | None = None


def resolve_level(level: int | str | None = None, *, verbose: int = 0) -> int:
    """Return a numeric logging level.

    Explicit ``level`` wins, then ``verbose`` (1 → DEBUG), then the
    ``SWEDBANK_YNAB_LOG_LEVEL`` environment variable, then ``INFO``.
    Unknown names fall back to ``INFO``.
    """

    if isinstance(level, int):
        return level
    if isinstance(level, str) and level.strip():
        name = level.strip().upper()
        if name.isdigit():
            return int(name)
        numeric = logging.getLevelName(name)
        return numeric if isinstance(numeric, int) else logging.INFO
    if verbose > 0:
        return logging.DEBUG
    env_val = os.getenv(LOG_LEVEL_ENV)
    if env_val and env_val.strip():
        return resolve_level(env_val)
    return logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    verbose: int = 0,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """Attach the package handler (once) and set the effective level."""

    global _handler

    logger = logging.getLogger(PACKAGE_LOGGER)
    numeric = resolve_level(level, verbose=verbose)

    if _handler is None:
        for h in list(logger.handlers):
            if isinstance(h, logging.NullHandler):
                logger.removeHandler(h)
        _handler = logging.StreamHandler(stream or sys.stderr)
        _handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))
        logger.addHandler(_handler)
        # Records stop at the package logger; the root logger never sees them.
        logger.propagate = False

    _handler.setLevel(numeric)
    logger.setLevel(numeric)
    return logger


def reset_logging() -> None:
    """Detach the package handler so a later ``configure_logging`` starts fresh."""

    global _handler
    logger = logging.getLogger(PACKAGE_LOGGER)
    if _handler is not None:
        logger.removeHandler(_handler)
        _handler = None
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


def get_logger(name: str) -> logging.Logger:
    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    if _handler is None and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "reset_logging", "resolve_level"]
