"""Logging configuration for the application."""

import logging
import sys

from eventhub.core.config import LOG_LEVEL

_configured = False


def setup_logging(level: str | None = None) -> None:
    """Configure logging for the application. Safe to call more than once."""
    global _configured
    if _configured:
        return

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel((level or LOG_LEVEL).upper())
    root_logger.addHandler(console_handler)

    # Set higher log levels for noisy components
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    _configured = True
