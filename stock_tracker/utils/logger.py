"""
Stock Tracker - Logger Configuration
Centralized logging with loguru
"""
import sys
from pathlib import Path
from typing import Optional
from loguru import logger

from stock_tracker.config import Settings, settings as default_settings


CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def configure_logging(settings: Optional[Settings] = None) -> None:
    """
    Install the console and optional file handlers.

    Args:
        settings: Settings to read DEBUG, LOG_LEVEL and LOG_FILE from
    """
    settings = settings or default_settings

    # Remove default handler
    logger.remove()

    logger.add(
        sys.stderr,
        colorize=True,
        format=CONSOLE_FORMAT,
        level="DEBUG" if settings.DEBUG else settings.LOG_LEVEL.upper(),
    )

    if settings.LOG_FILE:
        log_path = Path(settings.LOG_FILE)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_path,
            rotation="10 MB",
            retention="30 days",
            compression="gz",
            format=FILE_FORMAT,
            level="DEBUG",
        )


def get_logger(name: str = __name__):
    """
    Get a logger instance with the specified name.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger instance
    """
    return logger.bind(name=name)


# Export configured logger
__all__ = ["logger", "get_logger", "configure_logging"]
