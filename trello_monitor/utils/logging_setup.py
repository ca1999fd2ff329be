"""Logging configuration for Trello Monitor."""

import logging

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER_NAME = "trello_monitor"


def setup_logging(verbose: bool = False, console: Console = None) -> logging.Logger:
    """Configure the package logger with a rich console handler.

    Args:
        verbose: Log at DEBUG level instead of INFO
        console: Console to log to (defaults to a stderr console)

    Returns:
        The configured package logger
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)

    # Avoid adding handlers multiple times
    for handler in logger.handlers:
        if isinstance(handler, RichHandler):
            handler.setLevel(level)
            return logger

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=verbose,
        rich_tracebacks=True,
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(handler)

    return logger
