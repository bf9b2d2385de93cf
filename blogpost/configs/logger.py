"""File logging helper shared by every module."""

from logging import DEBUG, INFO, Logger
from logging.handlers import RotatingFileHandler
from pathlib import Path

from pythonjsonlogger.json import JsonFormatter

from blogpost.configs.settings import settings

LOG_FILE_NAME = "blogpost.log"
LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 3


def file_logger(logger: Logger) -> Logger:
    """
    Attach a rotating JSON file handler to the logger when file logging is on.

    Calling it twice on the same logger does not add a second handler.

    Args:
        logger: Logger to configure.

    Returns:
        Logger: The same logger instance.
    """
    logger.setLevel(DEBUG if settings.DEBUG else INFO)
    if not settings.LOG_TO_FILE:
        return logger

    if any(isinstance(h, RotatingFileHandler) for h in logger.handlers):
        return logger

    log_dir = Path(settings.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_dir / LOG_FILE_NAME,
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setFormatter(JsonFormatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    logger.addHandler(handler)
    return logger
