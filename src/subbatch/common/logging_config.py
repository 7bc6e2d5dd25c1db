"""Centralized logging configuration for the translator and its CLI."""

import logging
import sys
from pathlib import Path
from typing import Optional

from subbatch.common.config import settings
from subbatch.common.utils import DateTimeUtils

# Package loggers are children of this one (subbatch.translator.*, subbatch.common.*)
PACKAGE_LOGGER_NAME = "subbatch"


def setup_logging(
    service_name: str, log_file: Optional[str] = None, log_level: Optional[str] = None
) -> logging.Logger:
    """
    Configure logging for a service with consistent formatting.

    Args:
        service_name: Logger name to configure (e.g., 'subbatch')
        log_file: Optional log file path. If None, logs only to console
        log_level: Optional log level override. If None, uses settings.log_level

    Returns:
        Configured logger instance
    """
    level = log_level or settings.log_level
    log_level_value = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(service_name)
    logger.setLevel(log_level_value)

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    detailed_formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    simple_formatter = logging.Formatter(
        fmt="%(asctime)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
    )

    # Console handler (stderr keeps stdout free for command output)
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level_value)
    console_handler.setFormatter(simple_formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(log_level_value)
        file_handler.setFormatter(detailed_formatter)
        logger.addHandler(file_handler)

    # Prevent propagation to root logger
    logger.propagate = False

    return logger


def get_log_file_path(service_name: str) -> str:
    """
    Generate a dated log file path for a service.

    Args:
        service_name: Name of the service

    Returns:
        Path to log file
    """
    date_string = DateTimeUtils.get_date_string_for_log_file()
    return f"./logs/{service_name}_{date_string}.log"


def configure_third_party_loggers(level: str = "WARNING") -> None:
    """
    Configure logging levels for third-party libraries to reduce noise.

    Args:
        level: Log level for third-party libraries
    """
    third_party_loggers = [
        "httpx",
        "httpcore",
        "asyncio",
    ]

    log_level = getattr(logging, level.upper(), logging.WARNING)

    for logger_name in third_party_loggers:
        logging.getLogger(logger_name).setLevel(log_level)


def setup_service_logging(
    enable_file_logging: Optional[bool] = None, log_level: Optional[str] = None
) -> logging.Logger:
    """
    Convenience function to set up logging for the whole package.

    Args:
        enable_file_logging: Whether to write a dated log file; defaults to
            settings.log_file_enabled
        log_level: Optional log level override

    Returns:
        The configured package logger
    """
    configure_third_party_loggers()

    if enable_file_logging is None:
        enable_file_logging = settings.log_file_enabled
    log_file = get_log_file_path(PACKAGE_LOGGER_NAME) if enable_file_logging else None
    return setup_logging(PACKAGE_LOGGER_NAME, log_file, log_level)
