"""Logging configuration helpers."""

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(level: int = logging.WARNING) -> None:
    """Configure the dietplan logger with a single rich stderr handler.

    Calling again only adjusts the level.
    """
    logger = logging.getLogger("dietplan")
    logger.setLevel(level)
    if logger.handlers:
        return
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
