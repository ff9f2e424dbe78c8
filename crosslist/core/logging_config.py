# crosslist/core/logging_config.py
"""
Centralized logging configuration for the application.

This module configures logging levels to reduce noise from verbose libraries
while keeping important application logs visible.
"""

import logging
import os


def configure_logging():
    """
    Configure logging for the application.

    Sets appropriate log levels for different modules:
    - App code: INFO (or DEBUG if LOG_LEVEL=DEBUG)
    - HTTP clients (httpx, httpcore): WARNING only
    - Scheduler and database: WARNING only
    """

    # Get log level from environment, default to INFO
    log_level = os.environ.get("LOG_LEVEL", "INFO").upper()

    # Configure root logger
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler()]
    )

    # Quiet noisy HTTP client loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    # Scheduler logs every job run at INFO
    logging.getLogger("apscheduler").setLevel(logging.WARNING)

    # Quiet database loggers
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("asyncpg").setLevel(logging.WARNING)

    # Keep app loggers at configured level
    logging.getLogger("crosslist").setLevel(getattr(logging, log_level, logging.INFO))
    logging.getLogger("__main__").setLevel(getattr(logging, log_level, logging.INFO))

    logger = logging.getLogger(__name__)
    logger.info(f"Logging configured at level: {log_level}")
