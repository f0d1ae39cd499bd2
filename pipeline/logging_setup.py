"""Logging setup for hosts that embed the pipeline."""

import logging

from rich.console import Console
from rich.logging import RichHandler

from .config import get_config


def configure_logging(level: str | None = None, console: Console | None = None) -> None:
    """Route log records through rich.

    Args:
        level: Log level name (e.g. "INFO", "DEBUG"); defaults to ``pipeline.log_level``
        console: Console to write to (stderr by default)
    """
    level = level or get_config().pipeline.log_level
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )
