"""
Logging Utilities

Configures the feature store logger hierarchy with support for:
- Configurable log levels (DEBUG, INFO, WARNING, ERROR)
- Optional file output
- Debug mode with verbose output

Log Format:
    %(asctime)s - %(name)s - %(levelname)s - %(message)s

Environment:
    FEATURESTORE_LOG_LEVEL: Default level (INFO)
    FEATURESTORE_LOG_FILE: Optional log file path
    FEATURESTORE_DEBUG: Enable debug mode (true/1/yes)
"""

import logging
import os
import sys
from typing import Optional


ROOT_LOGGER_NAME = "src.featurestore"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Global logging configuration
_LOG_LEVEL = os.getenv("FEATURESTORE_LOG_LEVEL", "INFO").upper()
_LOG_FILE = os.getenv("FEATURESTORE_LOG_FILE", None)
_DEBUG_MODE = os.getenv("FEATURESTORE_DEBUG", "").lower() in ("true", "1", "yes")

# Configure root feature store logger once
_root_configured = False
_root_logger: Optional[logging.Logger] = None


def _level() -> int:
    if _DEBUG_MODE:
        return logging.DEBUG
    return getattr(logging, _LOG_LEVEL, logging.INFO)


def _configure_root_logger() -> None:
    """
    Configure the root feature store logger.

    Sets up handlers for console and optionally file output.
    Only runs once unless setup_logging() resets the configuration.
    """
    global _root_configured, _root_logger

    if _root_configured:
        return

    _root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    _root_logger.setLevel(_level())

    # Drop handlers from a previous configuration
    for handler in list(_root_logger.handlers):
        _root_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(_level())
    _root_logger.addHandler(console_handler)

    if _LOG_FILE:
        try:
            os.makedirs(os.path.dirname(_LOG_FILE) or ".", exist_ok=True)
            file_handler = logging.FileHandler(_LOG_FILE)
            file_handler.setFormatter(formatter)
            file_handler.setLevel(_level())
            _root_logger.addHandler(file_handler)
        except OSError as e:
            _root_logger.warning(f"Failed to create log file {_LOG_FILE}: {e}")

    _root_configured = True


def get_logger(name: str = ROOT_LOGGER_NAME, level: Optional[str] = None) -> logging.Logger:
    """
    Get a logger inside the feature store hierarchy.

    Args:
        name: Logger name (e.g., 'src.featurestore.core.resolver')
        level: Optional log level override (DEBUG, INFO, WARNING, ERROR)

    Returns:
        Configured logging.Logger instance
    """
    _configure_root_logger()

    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    return logger


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    debug: bool = False,
) -> logging.Logger:
    """
    Setup logging configuration for the feature store.

    Should be called once at application startup, before creating loggers.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional file path for log output
        debug: Enable debug mode (verbose output)

    Returns:
        Configured root logger

    Example:
        >>> setup_logging(level='DEBUG', log_file='featurestore.log')
        >>> logger = get_logger('src.featurestore.cli')
    """
    global _root_configured, _LOG_LEVEL, _LOG_FILE, _DEBUG_MODE

    _root_configured = False
    _LOG_LEVEL = level.upper()
    _LOG_FILE = log_file
    _DEBUG_MODE = debug

    _configure_root_logger()
    return _root_logger
