"""Centralized logging configuration for DrumCraft.

This module provides a consistent way to configure logging across the application.
"""

import logging
import sys
from typing import Optional, Dict

# Log levels for different modules
MODULE_LOG_LEVELS = {
    # Core modules
    "drumcraft": logging.INFO,
    "drumcraft.cli": logging.INFO,
    "drumcraft.core": logging.INFO,
    # Estimation runs every display frame, keep it quiet unless debugging
    "drumcraft.audio": logging.INFO,
    "drumcraft.audio.pitch_estimator": logging.WARNING,
    "drumcraft.services": logging.INFO,
    "drumcraft.tuning_session": logging.INFO,
    "drumcraft.logging_config": logging.WARNING,
    # Libraries/third-party
    "sounddevice": logging.ERROR,
    "soundfile": logging.ERROR,
    # Root logger
    "": logging.ERROR,
}

# Shared console handler
_console_handler: Optional[logging.Handler] = None

# Cache for loggers to avoid duplicate setup
_logger_cache: Dict[str, logging.Logger] = {}


def _level_for(name: str, log_levels: Dict[str, int]) -> int:
    """Return the level of the most specific configured prefix of ``name``."""
    parts = name.split(".")
    while parts:
        candidate = ".".join(parts)
        if candidate in log_levels:
            return log_levels[candidate]
        parts.pop()
    return log_levels[""]


def setup_logging(level: Optional[str] = None) -> None:
    """Set up logging configuration for the application.

    Args:
        level: If provided, override all 'drumcraft' log levels with this level (e.g., "DEBUG").
    """
    global _console_handler

    if _console_handler is None:
        _console_handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        _console_handler.setFormatter(formatter)

    log_levels = MODULE_LOG_LEVELS.copy()
    if level:
        numeric_level = logging.getLevelName(level.upper())
        if isinstance(numeric_level, int):
            for module_name in log_levels:
                if module_name.startswith("drumcraft"):
                    log_levels[module_name] = numeric_level
        else:
            logging.getLogger(__name__).error(f"Invalid log level: {level}")

    for module_name, module_level in log_levels.items():
        logger = logging.getLogger(module_name)
        logger.setLevel(module_level)
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        logger.addHandler(_console_handler)
        logger.propagate = False

    # Loggers handed out before setup pick up the new levels and handler
    for name, logger in _logger_cache.items():
        logger.setLevel(_level_for(name, log_levels))
        if _console_handler not in logger.handlers:
            logger.addHandler(_console_handler)

    logging.getLogger("drumcraft").info("Logging configuration complete")


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name.

    The level comes from the most specific entry of MODULE_LOG_LEVELS that
    is a dotted prefix of ``name``.

    Args:
        name: The full module name (e.g., 'drumcraft.tuning_session')

    Returns:
        A configured logger instance
    """
    if name in _logger_cache:
        return _logger_cache[name]

    logger = logging.getLogger(name)
    logger.setLevel(_level_for(name, MODULE_LOG_LEVELS))

    if _console_handler and _console_handler not in logger.handlers:
        logger.addHandler(_console_handler)

    logger.propagate = False
    _logger_cache[name] = logger
    return logger
