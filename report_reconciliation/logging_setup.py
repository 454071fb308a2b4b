"""Logging for ``report_reconciliation``.

Extraction runs inside request handlers of a host application, so engine
modules only ever log through ``get_logger("report_reconciliation.<module>")``
and leave output to the host. Standalone entrypoints (the CLI) call
:func:`configure_logging` once; hosts that manage logging themselves never
call it and records simply propagate to their root logger.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "report_reconciliation"
_LEVEL_ENV_VAR = "REPORT_RECONCILIATION_LOG_LEVEL"
_DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
_CONFIGURED = False


def _parse_level(level: int | str | None) -> int:
    """Resolve ``level``, then ``$REPORT_RECONCILIATION_LOG_LEVEL``, then INFO.

    Names are case-insensitive and numeric strings are accepted; an unknown
    name resolves to INFO.
    """

    if level is None:
        level = os.getenv(_LEVEL_ENV_VAR) or logging.INFO
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    numeric = logging.getLevelNamesMapping().get(name)
    return numeric if numeric is not None else logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] = sys.stderr,
) -> None:
    """Send package records to ``stream``; later calls are no-ops.

    The package logger stops propagating once configured so records are not
    printed twice when the host also has a root handler.
    """

    global _CONFIGURED
    if _CONFIGURED:
        return

    resolved = _parse_level(level)
    logger = logging.getLogger(_PKG_LOGGER_NAME)
    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    handler = logging.StreamHandler(stream)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(resolved)
    logger.propagate = False
    _CONFIGURED = True


def reset_logging() -> None:
    """Undo :func:`configure_logging` and return to the propagating default."""

    global _CONFIGURED
    logger = logging.getLogger(_PKG_LOGGER_NAME)
    for h in list(logger.handlers):
        logger.removeHandler(h)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
    _CONFIGURED = False


def get_logger(name: str) -> logging.Logger:
    """Logger for an engine module.

    Until :func:`configure_logging` runs, the package logger carries a
    ``NullHandler`` so a host without logging set up sees no
    "no handlers could be found" noise.
    """

    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "reset_logging"]
