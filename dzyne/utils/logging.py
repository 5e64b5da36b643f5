"""
Logging for the dzyne server and CLI

stdout belongs to the stdio transport, so everything goes to stderr.
The level comes from LOG_LEVEL, then DEBUG, then INFO; ENABLE_LOGGING=false
silences everything below CRITICAL.
"""

import logging
import sys
from typing import Optional

from ..config import Config

# HTTP clients log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "openai", "stripe")


def resolve_level() -> int:
    """Effective level for the "dzyne" logger tree."""
    if not Config.ENABLE_LOGGING:
        return logging.CRITICAL
    if Config.LOG_LEVEL:
        return logging.getLevelName(Config.LOG_LEVEL)
    return logging.DEBUG if Config.DEBUG else logging.INFO


def setup_logging(name: Optional[str] = None) -> logging.Logger:
    """
    Configure a logger (default "dzyne") for stderr output

    Safe to call again after the config changes: the level is reapplied
    and the existing handler reused.

    Args:
        name: Logger name

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name or "dzyne")
    level = resolve_level()
    logger.setLevel(level)

    noisy_level = logging.DEBUG if Config.DEBUG else logging.WARNING
    for noisy in NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(max(noisy_level, level))

    handler = next((h for h in logger.handlers if getattr(h, "_dzyne", False)), None)
    if handler is None:
        handler = logging.StreamHandler(sys.stderr)
        handler._dzyne = True
        handler.setFormatter(logging.Formatter(
            fmt='[%(asctime)s] %(levelname)s [%(name)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        logger.addHandler(handler)
    handler.setLevel(level)

    return logger

# Package-wide logger; child loggers under "dzyne." propagate to it
logger = setup_logging("dzyne")
