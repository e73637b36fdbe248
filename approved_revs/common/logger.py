"""Logging setup for the approval engine.

Library modules log through ``logging.getLogger(__name__)`` and never
attach handlers themselves. Applications call ``setup_logger`` once for
the ``approved_revs`` root logger.
"""

import logging
import logging.handlers
import os
from typing import Optional

from approved_revs.core.config import Settings

LOGGER_NAME = "approved_revs"
DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


def setup_logger(
    name: str = LOGGER_NAME,
    log_dir: str = "/var/log/approved_revs",
    level: str = "INFO",
    log_format: Optional[str] = None,
    date_format: Optional[str] = None,
    file_logging: bool = False,
    console_logging: bool = True,
    max_bytes: int = 10485760,  # 10MB
    backup_count: int = 5,
) -> logging.Logger:
    """Set up a logger with optional rotating file and console handlers.

    Calling it again for the same name only updates the level.

    Args:
        name: Logger name; child loggers of ``approved_revs.*`` inherit it
        log_dir: Directory for the log file
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Custom log format string
        date_format: Custom date format string (ISO 8601 by default)
        file_logging: Enable file logging
        console_logging: Enable console logging
        max_bytes: Maximum log file size before rotation
        backup_count: Number of rotated files to keep

    Returns:
        Configured logger instance

    Raises:
        ValueError: If the level name is unknown
    """
    logger = logging.getLogger(name)

    level_upper = level.upper()
    if level_upper not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        raise ValueError(
            f"Invalid log level: {level}. "
            f"Must be one of: DEBUG, INFO, WARNING, ERROR, CRITICAL"
        )
    logger.setLevel(getattr(logging, level_upper))

    if logger.handlers:
        return logger

    formatter = logging.Formatter(
        log_format or DEFAULT_FORMAT,
        datefmt=date_format or DEFAULT_DATE_FORMAT,
    )

    if file_logging:
        os.makedirs(log_dir, exist_ok=True)
        log_file = os.path.join(log_dir, f"{name}.log")
        file_handler = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=max_bytes, backupCount=backup_count
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if console_logging:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    return logger


def setup_from_settings(settings: Settings) -> logging.Logger:
    """Configure the package logger from runtime settings."""
    return setup_logger(
        LOGGER_NAME,
        log_dir=settings.log_dir,
        level=settings.log_level,
        file_logging=settings.file_logging,
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger below the package logger, e.g. ``get_logger("api")``."""
    if name == LOGGER_NAME or name.startswith(LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
