"""Logging for Discord Reminders.

One dated file per day under LOG_DIR, plus the console when run from a
terminal. APScheduler's own logger writes to the same file, but only
warnings and up, since it logs every job it adds or runs.
"""

import logging
import sys
from datetime import datetime

from config import LOG_DIR, LOG_LEVEL

FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"


def setup_logging(level: str = LOG_LEVEL) -> logging.Logger:
    """Configure the reminders logger and return it."""
    logger = logging.getLogger("discord_reminders")
    logger.setLevel(getattr(logging, level, logging.INFO))
    logger.handlers.clear()

    file_handler = logging.FileHandler(
        LOG_DIR / f"reminders-{datetime.now():%Y-%m-%d}.log", encoding="utf-8"
    )
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    handlers = [file_handler]

    if sys.stdout is not None and sys.stdout.isatty():
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt="%H:%M:%S"))
        handlers.append(console_handler)

    for handler in handlers:
        logger.addHandler(handler)

    scheduler_logger = logging.getLogger("apscheduler")
    scheduler_logger.setLevel(logging.WARNING)
    scheduler_logger.handlers.clear()
    for handler in handlers:
        scheduler_logger.addHandler(handler)

    return logger


# Global logger instance
logger = setup_logging()
