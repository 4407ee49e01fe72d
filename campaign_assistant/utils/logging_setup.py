"""Logging configuration for the campaign assistant.

Console logging with one format for every module. The level comes from the
LOG_LEVEL environment variable.
"""

import logging
import os


def setup_logging() -> None:
    """Configure the root logger for the application."""
    log_level_str = os.getenv("LOG_LEVEL", "INFO").upper()
    log_level = getattr(logging, log_level_str, logging.INFO)

    logger = logging.getLogger()
    logger.setLevel(log_level)
    logger.handlers = []

    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # Client libraries log every request at INFO
    logging.getLogger("httpx").setLevel(max(log_level, logging.WARNING))
