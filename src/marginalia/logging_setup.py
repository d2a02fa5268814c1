"""Logging and console output for Marginalia.

Command output (tables, generated pages) goes to ``console`` on stdout.
Diagnostics go through the ``marginalia`` logger to ``err_console`` on stderr,
so output such as ``marginalia tags --page > tags.md`` stays clean when posts
are skipped.
"""

from __future__ import annotations

import logging
import os
from typing import Final

from rich.console import Console
from rich.logging import RichHandler

__all__ = ["PACKAGE_LOGGER", "configure_logging", "console", "err_console"]

PACKAGE_LOGGER: Final[str] = "marginalia"
_LOG_LEVEL_ENV: Final[str] = "MARGINALIA_LOG_LEVEL"
_DEFAULT_LEVEL_NAME: Final[str] = "INFO"

console = Console()
err_console = Console(stderr=True)


def _resolve_level(override: int | None = None) -> int:
    """Return the logging level, preferring an explicit override."""
    if override is not None:
        return override
    level_name = os.getenv(_LOG_LEVEL_ENV, _DEFAULT_LEVEL_NAME).upper()
    return getattr(logging, level_name, logging.INFO)


def _managed_handler(logger: logging.Logger) -> RichHandler | None:
    for handler in logger.handlers:
        if isinstance(handler, RichHandler) and getattr(handler, "_marginalia_managed", False):
            return handler
    return None


def configure_logging(level: int | None = None) -> logging.Logger:
    """Attach a Rich stderr handler to the ``marginalia`` logger.

    Safe to call repeatedly: the handler is installed once and only the level
    changes. Other loggers (and the root logger) are left alone.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    if _managed_handler(logger) is None:
        handler = RichHandler(
            console=err_console,
            rich_tracebacks=True,
            show_path=False,
            markup=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        handler._marginalia_managed = True  # type: ignore[attr-defined]
        logger.addHandler(handler)

    logger.setLevel(_resolve_level(level))
    return logger
