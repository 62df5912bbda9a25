"""
utils/logger.py
───────────────
Loguru sinks for the API. Imported for its side effect: the first import
wires stderr (and the rotating JSON file, when LOG_FILE is set) using the
cached settings.

    from utils.logger import logger
    logger.bind(user_id=uid).info("Like recorded")
"""

import sys
from typing import Optional

from loguru import logger

from config.settings import Settings, get_settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


def setup_logger(settings: Optional[Settings] = None) -> None:
    settings = settings or get_settings()
    logger.remove()

    # production ships structured lines to the log collector
    if settings.is_production:
        logger.add(sys.stderr, level=settings.log_level, serialize=True)
    else:
        logger.add(sys.stderr, level=settings.log_level, format=CONSOLE_FORMAT, colorize=True)

    if settings.log_file is not None:
        settings.log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(settings.log_file),
            level="DEBUG",
            rotation="10 MB",
            retention="14 days",
            serialize=True,
        )


setup_logger()

__all__ = ["logger", "setup_logger"]
