"""Shared utility functions for the budget intake project."""

import logging
import math
from datetime import UTC, date, datetime
from pathlib import Path

import colorlog

ROOT_LOGGER_NAME = "budget-intake"
EXCERPT_LEN = 50


def get_logger(name: str) -> logging.Logger:
    """Get a logger with a colorized format for the project.

    Child loggers (``budget-intake.*``) propagate to the project logger, which owns the handlers.
    """
    logger = logging.getLogger(name)
    if name.startswith(f"{ROOT_LOGGER_NAME}."):
        get_logger(ROOT_LOGGER_NAME)
        return logger
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = colorlog.ColoredFormatter(
            "%(log_color)s%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "bold_red",
            },
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.propagate = False
    return logger


def ensure_dir(path: str | Path) -> None:
    """Ensure a directory exists (like mkdir -p)."""
    Path(path).mkdir(parents=True, exist_ok=True)


def utcnow_iso() -> str:
    """Get the current UTC time as an ISO8601 string."""
    return datetime.now(UTC).isoformat()


def today_iso(today: date | None = None) -> str:
    """Return the given (or current local) date as YYYY-MM-DD."""
    return (today or date.today()).isoformat()


def round_half_up(value: float, digits: int = 0) -> float:
    """Round half away from zero instead of Python's banker's rounding."""
    factor = 10**digits
    rounded = math.floor(abs(value) * factor + 0.5) / factor
    return math.copysign(rounded, value) if value else 0.0


def excerpt(text: str, limit: int = EXCERPT_LEN) -> str:
    """Truncate text for log and error messages."""
    if len(text) <= limit:
        return text
    return text[:limit] + "..."
