"""Logging setup for the terminal app."""
import logging
import os

from rich.logging import RichHandler

LOG_LEVEL_ENV = "STUDY_BUDDY_LOG_LEVEL"


def setup_logging(level: str | None = None, console=None) -> logging.Logger:
    """Attach a RichHandler to the package logger (once)."""
    level = (level or os.getenv(LOG_LEVEL_ENV, "WARNING")).upper()
    logger = logging.getLogger("study_buddy")
    logger.setLevel(level)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=console, show_path=False, rich_tracebacks=True)
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
        logger.addHandler(handler)
    logger.propagate = False
    return logger
