"""
Logging configuration using loguru.

Pretty console output in development, JSON lines in production so the
RSVP retry and drift warnings can be filtered downstream.
"""
import logging
import sys
from loguru import logger
from campushub.core.config import settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def _level() -> str:
    if settings.LOG_LEVEL:
        return settings.LOG_LEVEL.upper()
    return "DEBUG" if settings.ENVIRONMENT == "development" else "INFO"


def setup_logging() -> None:
    """(Re)install the loguru sinks; safe to call more than once."""
    logger.remove()

    if settings.ENVIRONMENT == "production":
        logger.add(sys.stdout, level=_level(), serialize=True)
        logger.add(
            "logs/campushub.log",
            rotation="500 MB",
            retention="10 days",
            compression="zip",
            level="INFO",
            serialize=True,
        )
    else:
        logger.add(
            sys.stdout,
            format=CONSOLE_FORMAT,
            level=_level(),
            colorize=settings.ENVIRONMENT != "test",
        )

    # Per-request access lines duplicate what the proxy already records
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


setup_logging()

__all__ = ["logger", "setup_logging"]
