"""Logging configuration for the ``gcsblob`` console script.

Library modules only create loggers (``logging.getLogger(__name__)``);
handlers are installed here, once, by :func:`gcsblob.cli.app.cli`.
Records go to stderr through Rich's ``RichHandler`` when Rich is
installed, else through a plain ``StreamHandler``.

The level is read from ``GCSBLOB_LOG_LEVEL`` (default ``WARNING``).
"""

from __future__ import annotations

import logging
import os
import sys

from gcsblob.cli.console import get_rich_console
from gcsblob.exceptions import EnvironmentError

LOG_LEVEL_ENV: str = "GCSBLOB_LOG_LEVEL"
DEFAULT_LOG_LEVEL: int = logging.WARNING

_PLAIN_FORMAT: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def resolve_log_level(value: str | None) -> int:
    """Map a level name such as ``"debug"`` to its numeric value.

    Unknown or empty names fall back to :data:`DEFAULT_LOG_LEVEL`.
    """
    if not value:
        return DEFAULT_LOG_LEVEL
    level = logging.getLevelName(value.strip().upper())
    return level if isinstance(level, int) else DEFAULT_LOG_LEVEL


def _build_handler() -> logging.Handler:
    try:
        rich_console = get_rich_console()
        from rich.logging import RichHandler
    except (EnvironmentError, ModuleNotFoundError):
        handler: logging.Handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_PLAIN_FORMAT))
        return handler
    return RichHandler(
        console=rich_console,
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )


def configure_logging(level: str | None = None) -> logging.Logger:
    """Install a stderr handler on the ``gcsblob`` logger.

    Parameters
    ----------
    level:
        Level name; defaults to ``$GCSBLOB_LOG_LEVEL``.

    Returns
    -------
    logging.Logger
        The configured package logger.
    """
    package_logger = logging.getLogger("gcsblob")
    for existing in list(package_logger.handlers):
        package_logger.removeHandler(existing)
    package_logger.addHandler(_build_handler())
    package_logger.setLevel(resolve_log_level(level or os.environ.get(LOG_LEVEL_ENV)))
    package_logger.propagate = False
    return package_logger
