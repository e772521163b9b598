"""
Logging configuration for the Vendorconex backend.

One package logger writes to stdout; modules ask for a child logger by name.
"""
import logging
import sys

from .config import get_settings

LOG_LEVEL = get_settings().log_level
logger = logging.getLogger("vendorconex")
logger.setLevel(LOG_LEVEL)

if not logger.handlers:
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(LOG_LEVEL)

    formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    console_handler.setFormatter(formatter)

    logger.addHandler(console_handler)

# Avoid duplicate lines through the root logger
logger.propagate = False


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the package logger, or a child ``vendorconex.<name>`` logger."""
    if name:
        return logging.getLogger(f"vendorconex.{name}")
    return logger
