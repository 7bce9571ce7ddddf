"""Logging configuration for Ledgerly.

Everything goes to a dated log file; the console gets plain messages so that
CLI output (tables, alerts, summaries) reads cleanly.
"""

import logging
from datetime import date
from typing import Optional

from config import Config

LOGGER_NAME = "ledgerly"


def setup_logging(config: Config, console_level: Optional[str] = None) -> logging.Logger:
    """Set up application logging with file and console handlers.

    Args:
        config: Application configuration containing log settings.
        console_level: Optional override for the console handler level
            (the file handler always uses config.log_level).

    Returns:
        Configured logger instance.
    """
    config.log_dir.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)

    # Called once per CLI run, but tests may call it repeatedly
    logger.handlers.clear()

    file_handler = logging.FileHandler(
        config.log_dir / f"ledgerly-{date.today().isoformat()}.log"
    )
    file_handler.setLevel(config.log_level)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level or config.log_level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get the application logger, or one of its children.

    Args:
        name: Optional child name, e.g. "alerts" gives "ledgerly.alerts".

    Returns:
        The ledgerly logger instance.
    """
    if name:
        return logging.getLogger(f"{LOGGER_NAME}.{name}")
    return logging.getLogger(LOGGER_NAME)
