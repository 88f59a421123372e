"""Logging for the ``spend_anomalies`` package.

Library modules call :func:`get_logger` and never attach handlers. The CLI
(or a host application) calls :func:`configure_logging` once; it installs a
single tagged ``StreamHandler`` on the ``"spend_anomalies"`` logger at the
level from :class:`~spend_anomalies.config.Settings`. Whether logging is
configured is read off that handler, so removing it resets the state.
"""

from __future__ import annotations

import logging
import sys
from typing import IO

from .config import get_settings

PACKAGE_LOGGER = "spend_anomalies"
DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
_HANDLER_TAG = "_spend_anomalies_handler"


def resolve_level(level: int | str | None = None) -> int:
    """Turn a level name/number into a ``logging`` level.

    ``None`` falls back to ``SPEND_ANOMALIES_LOG_LEVEL``; unknown names map
    to ``INFO``.
    """

    raw = get_settings().log_level if level is None else level
    if isinstance(raw, int):
        return raw
    name = raw.strip().upper()
    if name.isdigit():
        return int(name)
    return logging.getLevelNamesMapping().get(name, logging.INFO)


def _installed_handler(logger: logging.Logger) -> logging.Handler | None:
    return next((h for h in logger.handlers if getattr(h, _HANDLER_TAG, False)), None)


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> logging.Handler:
    """Send package logs to ``stream`` (default ``sys.stderr``).

    Idempotent: a second call returns the handler installed by the first and
    changes nothing.
    """

    logger = logging.getLogger(PACKAGE_LOGGER)
    existing = _installed_handler(logger)
    if existing is not None:
        return existing

    for h in [h for h in logger.handlers if isinstance(h, logging.NullHandler)]:
        logger.removeHandler(h)

    resolved = resolve_level(level)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    setattr(handler, _HANDLER_TAG, True)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))

    logger.setLevel(resolved)
    logger.addHandler(handler)
    logger.propagate = False
    return handler


def get_logger(name: str) -> logging.Logger:
    """Return ``name``'s logger; keeps the package logger quiet until configured."""

    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    if not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "resolve_level"]
