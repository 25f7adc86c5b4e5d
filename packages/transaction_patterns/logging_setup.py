"""Logging for the ``transaction_patterns`` package.

Entrypoints (the CLI) call :func:`configure_logging` once; library modules
only call :func:`get_logger` and never attach handlers. Messages are short
``event:key=value`` text, e.g. ``skip:malformed pos=3 id='a1'`` or
``store:create id=... type=expense``.

Environment:

- ``TRANSACTION_PATTERNS_LOG_LEVEL``: level name or number (default ``INFO``).
- ``TRANSACTION_PATTERNS_LOG_FORMAT``: ``plain`` (default), ``short`` or a
  literal ``logging`` format string.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "transaction_patterns"
LEVEL_ENV_VAR = "TRANSACTION_PATTERNS_LOG_LEVEL"
FORMAT_ENV_VAR = "TRANSACTION_PATTERNS_LOG_FORMAT"

FORMATS: dict[str, str] = {
    "plain": "%(asctime)s %(name)s %(levelname)s %(message)s",
    "short": "%(levelname)s %(name)s: %(message)s",
}

# The handler installed by configure_logging, or None while unconfigured
_handler: logging.Handler | None = None


class _CurrentStderrHandler(logging.StreamHandler):
    """Stream handler bound to whatever ``sys.stderr`` is at emit time.

    Typer's test runner and embedding hosts replace ``sys.stderr`` after the
    CLI has configured logging.
    """

    def __init__(self) -> None:
        logging.Handler.__init__(self)

    @property
    def stream(self) -> IO[str]:  # type: ignore[override]
        return sys.stderr


def _level_from_name(value: str) -> int | None:
    value = value.strip().upper()
    if value.isdigit():
        return int(value)
    numeric = getattr(logging, value, None)
    return numeric if isinstance(numeric, int) else None


def resolve_level(level: int | str | None = None) -> int:
    """Explicit level, else the env var, else ``INFO``; unknown names fall through."""

    for candidate in (level, os.getenv(LEVEL_ENV_VAR)):
        if isinstance(candidate, int):
            return candidate
        if isinstance(candidate, str):
            numeric = _level_from_name(candidate)
            if numeric is not None:
                return numeric
    return logging.INFO


def resolve_format(fmt: str | None = None) -> str:
    chosen = fmt or os.getenv(FORMAT_ENV_VAR) or "plain"
    return FORMATS.get(chosen.strip().lower(), chosen)


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> logging.Handler:
    """Install the package handler once and return it.

    ``fmt`` is a preset name from :data:`FORMATS` or a format string. Without
    ``stream`` the handler follows the current ``sys.stderr``. Later calls
    return the existing handler unchanged until :func:`reset_logging`.
    """

    global _handler
    if _handler is not None:
        return _handler

    logger = logging.getLogger(_PKG_LOGGER_NAME)
    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    resolved = resolve_level(level)
    handler = _CurrentStderrHandler() if stream is None else logging.StreamHandler(stream)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(resolve_format(fmt)))

    logger.setLevel(resolved)
    logger.addHandler(handler)
    logger.propagate = False

    _handler = handler
    return handler


def is_configured() -> bool:
    return _handler is not None


def reset_logging() -> None:
    """Detach every package handler so ``configure_logging`` may run again."""

    global _handler
    logger = logging.getLogger(_PKG_LOGGER_NAME)
    for h in list(logger.handlers):
        logger.removeHandler(h)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
    _handler = None


def get_logger(name: str) -> logging.Logger:
    """Return ``name``'s logger; the package stays silent until configured."""

    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if _handler is None and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = [
    "FORMATS",
    "FORMAT_ENV_VAR",
    "LEVEL_ENV_VAR",
    "configure_logging",
    "get_logger",
    "is_configured",
    "reset_logging",
    "resolve_format",
    "resolve_level",
]
