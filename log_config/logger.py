"""Centralized logging configuration using loguru."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional, Union

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"

# Remove default handler
logger.remove()

_console_handler_id = logger.add(
    sys.stderr,
    level="INFO",
    format=CONSOLE_FORMAT,
    colorize=True,
)


def get_logger(name: Optional[str] = None):
    """Get a logger instance with the given name.

    Args:
        name: Module name for the logger (usually __name__)

    Returns:
        Configured logger instance
    """
    if name:
        return logger.bind(name=name)
    return logger


def set_console_level(level: str) -> None:
    """Replace the stderr handler with one at the given level.

    Args:
        level: Loguru level name (TRACE, DEBUG, INFO, WARNING, ERROR)
    """
    global _console_handler_id
    logger.remove(_console_handler_id)
    _console_handler_id = logger.add(
        sys.stderr,
        level=level.upper(),
        format=CONSOLE_FORMAT,
        colorize=True,
    )


def add_file_handler(path: Union[str, Path], level: str = "DEBUG") -> int:
    """Add a rotating file sink.

    Args:
        path: Log file path, parent directories are created
        level: Minimum level written to the file

    Returns:
        Loguru handler id (pass to ``logger.remove`` to detach)
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    return logger.add(
        path,
        rotation="20 MB",
        retention="10 days",
        level=level.upper(),
        format=FILE_FORMAT,
        enqueue=True,  # Worker threads log too
    )


def log_performance(operation: str, duration_ms: float, threshold_ms: float = 50.0) -> None:
    """Log performance metrics with warnings for slow operations.

    Args:
        operation: Description of the operation
        duration_ms: Duration in milliseconds
        threshold_ms: Threshold for warning (default: 50ms, one control frame)
    """
    if duration_ms > threshold_ms:
        logger.warning(f"Slow operation: {operation} took {duration_ms:.2f}ms (threshold: {threshold_ms}ms)")
    else:
        logger.debug(f"Performance: {operation} took {duration_ms:.2f}ms")


__all__ = ["logger", "get_logger", "set_console_level", "add_file_handler", "log_performance"]
