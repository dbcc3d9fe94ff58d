"""Logging configuration for the form-state command line."""

import logging
import os

LOG_LEVEL_ENV = "FORM_STATE_LOG_LEVEL"


def resolve_log_level(default: int = logging.WARNING) -> int:
    """Read the log level from the environment, falling back to ``default``."""
    name = os.getenv(LOG_LEVEL_ENV)
    if not name:
        return default
    level = logging.getLevelName(name.upper())
    if isinstance(level, int):
        return level
    return default


def setup_logging(level: int | None = None) -> logging.Logger:
    """Setup basic logging and return the package logger."""
    logging.basicConfig(
        level=level if level is not None else resolve_log_level(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # Suppress noisy library logs
    logging.getLogger("pydantic").setLevel(logging.WARNING)
    return logging.getLogger("form_state")
