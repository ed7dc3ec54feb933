"""Package-wide logging for ``statement_import``.

Every engine module logs through a child of the ``"statement_import"`` logger
obtained with :func:`get_logger`; none of them installs handlers. Output is
switched on by an entry point (the CLI root callback) calling
:func:`configure_logging` once. Until then a ``NullHandler`` keeps the package
quiet when it is embedded in another application.

The default level comes from ``STATEMENT_IMPORT_LOG_LEVEL`` (a level name such
as ``debug`` or a number) and falls back to ``INFO``. Row-level parse failures
are data, not events, so the pipeline only reports per-stage counts at
``DEBUG``.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "statement_import"
_LEVEL_ENV_VAR = "STATEMENT_IMPORT_LOG_LEVEL"
_DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
_CONFIGURED = False


def _level_from_text(text: str) -> int | None:
    text = text.strip().upper()
    if text.isdigit():
        return int(text)
    value = logging.getLevelName(text)
    return value if isinstance(value, int) else None


def _resolve_level(level: int | str | None) -> int:
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        return _level_from_text(level) or logging.INFO
    env_val = os.getenv(_LEVEL_ENV_VAR, "")
    return (_level_from_text(env_val) if env_val else None) or logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> None:
    """Send package records to ``stream`` (default: the current ``sys.stderr``).

    Only the first call has an effect. ``level=None`` defers to
    ``STATEMENT_IMPORT_LOG_LEVEL``.
    """

    global _CONFIGURED
    if _CONFIGURED:
        return

    resolved = _resolve_level(level)
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    for h in [h for h in pkg_logger.handlers if isinstance(h, logging.NullHandler)]:
        pkg_logger.removeHandler(h)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FORMAT))

    pkg_logger.addHandler(handler)
    pkg_logger.setLevel(resolved)
    # Records stop here; a host's root handlers would print them twice.
    pkg_logger.propagate = False
    _CONFIGURED = True


def reset_logging() -> None:
    """Undo :func:`configure_logging` (used between tests)."""

    global _CONFIGURED
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    for h in list(pkg_logger.handlers):
        pkg_logger.removeHandler(h)
    pkg_logger.setLevel(logging.NOTSET)
    pkg_logger.propagate = True
    _CONFIGURED = False


def get_logger(name: str) -> logging.Logger:
    """Return ``logging.getLogger(name)``, keeping the package silent if unconfigured."""

    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "reset_logging", "get_logger"]
