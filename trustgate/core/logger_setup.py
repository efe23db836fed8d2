"""
Logger Setup
-----------
loguru sinks for the KYC service: colored console output always, plus
rotated plain-text files when not running in debug mode.
"""

import sys
from loguru import logger

from trustgate.core.config_manager import ApplicationSettings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}:{function}:{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"
LOG_FILE_PATTERN = "logs/trustgate_{time:YYYY-MM-DD}.log"


def configure_logger(settings: ApplicationSettings) -> None:
    level = settings.log_level
    logger.remove()

    # diagnose prints local variable values into tracebacks
    logger.add(
        sys.stdout,
        format=CONSOLE_FORMAT,
        level=level,
        colorize=True,
        diagnose=settings.debug,
    )
    if not settings.debug:
        logger.add(
            LOG_FILE_PATTERN,
            format=FILE_FORMAT,
            level=level,
            rotation="500 MB",
            retention="10 days",
            diagnose=False,
            enqueue=True,
        )

    logger.info(f"Logger configured with level: {level}")
