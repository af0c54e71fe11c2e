import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from freightdesk.core.config import settings

LOG_FORMAT = "%(levelname)s | %(asctime)s | %(name)s | %(message)s"


def configure_logging() -> None:
    """Console logging, plus a rotating file when LOG_FILE is set."""
    formatter = logging.Formatter(LOG_FORMAT)
    level = logging.getLevelName(settings.LOG_LEVEL.upper())
    if not isinstance(level, int):
        level = logging.INFO

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(console_handler)

    if settings.LOG_FILE:
        log_file = Path(settings.LOG_FILE)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file, maxBytes=2_000_000, backupCount=3, encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
