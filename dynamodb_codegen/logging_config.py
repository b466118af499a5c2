"""
Logging setup for dynamodb_codegen.

Every module obtains its logger through ``get_logger(__name__)``; handlers are
only installed when ``setup_logging`` is called (normally by the CLI), so
library users keep full control over logging configuration.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "dynamodb_codegen"

_LOG_FORMAT = "%(message)s"
_PLAIN_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    """Return a logger for the given module name."""
    return logging.getLogger(name)


def setup_logging(
    level: int | str = logging.WARNING,
    use_rich: bool = True,
    console: Console | None = None,
) -> logging.Logger:
    """Configure the package logger.

    Args:
        level: Logging level name or number.
        use_rich: Render records with rich instead of plain text.
        console: Console used by the rich handler (stderr by default).

    Returns:
        The configured package logger.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    # Replace handlers from an earlier call
    for handler in list(logger.handlers):
        if not isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)

    if use_rich:
        handler: logging.Handler = RichHandler(
            console=console or Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_PLAIN_FORMAT))

    handler.setLevel(level)
    logger.addHandler(handler)
    return logger
