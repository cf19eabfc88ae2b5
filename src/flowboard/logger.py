"""Logging setup for FlowBoard.

Library modules only call ``logging.getLogger(__name__)``; handlers are
installed here, once, by the command-line entry points.
"""

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from .config import LOG_TIMESTAMP_FORMAT

LOGGER_NAME = "flowboard"


def setup_logging(
    level: str | int = "INFO",
    log_file: str | Path | None = None,
    console: Console | None = None
) -> logging.Logger:
    """Configure the ``flowboard`` logger.

    Args:
        level: Level name (e.g. "DEBUG") or numeric level for console output
        log_file: Optional path; when given, DEBUG and above are also written there
        console: Optional Rich console to render log records on

    Returns:
        The configured package logger
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if log_file else level)
    logger.handlers.clear()
    logger.propagate = False

    rich_handler = RichHandler(
        console=console,
        show_path=False,
        log_time_format=LOG_TIMESTAMP_FORMAT,
        rich_tracebacks=True,
    )
    rich_handler.setLevel(level)
    logger.addHandler(rich_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))
        logger.addHandler(file_handler)

    return logger
