"""
================================================================================
Logging Setup
================================================================================

Centralized Loguru configuration for the test framework and the runner.

Settings (config.yaml):
    logging.level    Log level (DEBUG, INFO, WARNING, ERROR)
    logging.format   Loguru format string
    logging.file     Optional log file, rotated and compressed

Author: Automation Team
License: MIT
================================================================================
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from .config_loader import ConfigLoader


DEFAULT_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"
)

_logger_initialized: bool = False


def init_logger(config: Optional[ConfigLoader] = None, level: Optional[str] = None) -> None:
    """
    Initializes the global Loguru logger with consistent configuration.

    Safe to call more than once; only the first call configures sinks.

    Args:
        config: Settings source for logging.* keys
        level: Log level override
    """
    global _logger_initialized

    if _logger_initialized:
        return

    def setting(key: str, default):
        return config.get(key, default) if config is not None else default

    log_level = str(level or setting("logging.level", "INFO")).upper()
    log_format = setting("logging.format", DEFAULT_FORMAT)

    logger.remove()
    logger.add(
        sys.stderr,
        level=log_level,
        format=log_format,
        colorize=True,
        backtrace=True,
        diagnose=False,
    )

    log_file = setting("logging.file", None)
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            level=log_level,
            format=log_format.replace("{level: <8}", "{level}"),
            rotation=setting("logging.rotation", "10 MB"),
            retention=setting("logging.retention", "7 days"),
            compression="zip",
        )

    _logger_initialized = True
    logger.debug(f"Logger initialized with level: {log_level}")


__all__ = ["init_logger"]
