"""Centralized logging utility with colored console output."""

import logging
import os
from typing import Mapping, Optional

from rich.console import Console
from rich.logging import RichHandler


LOG_LEVEL_ENV = "LEAD_ENGINE_LOG_LEVEL"

_loggers: dict[str, logging.Logger] = {}


def _resolve_level(level: Optional[int]) -> int:
    """Explicit level wins, then LEAD_ENGINE_LOG_LEVEL, then INFO."""
    if level is not None:
        return level
    env_level = os.getenv(LOG_LEVEL_ENV, "").strip().upper()
    if env_level:
        resolved = logging.getLevelName(env_level)
        if isinstance(resolved, int):
            return resolved
    return logging.INFO


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Get or create a logger with colored console output.

    Args:
        name: Logger name (typically __name__ of calling module).
        level: Optional logging level. Defaults to LEAD_ENGINE_LOG_LEVEL or INFO.

    Returns:
        Configured logger instance.
    """
    if name in _loggers:
        return _loggers[name]

    logger = logging.getLogger(name)
    logger.setLevel(_resolve_level(level))

    if not logger.handlers:
        console = Console(stderr=True)
        handler = RichHandler(
            console=console,
            show_time=True,
            show_path=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)

    logger.propagate = False
    _loggers[name] = logger
    return logger


def format_counts(counts: Mapping[str, int]) -> str:
    """
    Render an integer mapping as 'key=value' pairs.

    Non-integer values are dropped so that a stray field value can never
    reach a log line through a stats dict.

    Args:
        counts: Mapping of counter name to integer.

    Returns:
        Comma-separated 'key=value' string.
    """
    parts = [
        f"{key}={value}"
        for key, value in counts.items()
        if isinstance(value, int) and not isinstance(value, bool)
    ]
    return ", ".join(parts)


def log_counts(logger: logging.Logger, label: str, counts: Mapping[str, int]) -> None:
    """Log a stage summary made only of integer counters."""
    logger.info(f"{label}: {format_counts(counts)}")
