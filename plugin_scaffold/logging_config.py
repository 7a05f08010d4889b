"""Logging setup for the scaffolding tool.

Every module does:
    from .logging_config import get_logger
    logger = get_logger(__name__)

Handlers are installed once, by the CLI entry point, via configure_logging().
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "plugin_scaffold"
DEFAULT_FORMAT = "%(name)s: %(message)s"


def configure_logging(level: int = logging.WARNING, console: Console | None = None) -> None:
    """Configure the package logger with a rich handler on stderr.

    Safe to call multiple times; the handler is only added once.

    Args:
        level: Logging level for the package logger.
        console: Console to log to (defaults to a stderr console).
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if not package_logger.handlers:
        handler = RichHandler(
            console=console or Console(stderr=True),
            show_path=False,
            show_time=False,
        )
        handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
        package_logger.addHandler(handler)

    package_logger.setLevel(level)


def get_logger(name: str) -> logging.Logger:
    """Return a logger for a module; configuration lives in configure_logging()."""
    return logging.getLogger(name)
