import logging
import sys
from logging.handlers import RotatingFileHandler
from . import settings


def setup_logger(
    name: str = None,
    log_level: int | str = None,
    log_file: str = None,
) -> logging.Logger:
    """
    Attaches console and rotating file output to the given logger (root by
    default). Level and file name fall back to settings.LOG_LEVEL and
    settings.LOG_FILE. Calling it again for a configured logger only updates
    its level.
    """
    level = log_level or settings.LOG_LEVEL
    if isinstance(level, str):
        level = logging.getLevelName(level.strip().upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {log_level or settings.LOG_LEVEL}")

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Only this logger's own handlers count; ancestors may have their own
    if logger.handlers:
        return logger

    # Operators read the console; the file keeps the engine trail
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console_handler)

    settings.LOG_DIR.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        settings.LOG_DIR / (log_file or settings.LOG_FILE),
        maxBytes=settings.LOG_MAX_BYTES,
        backupCount=settings.LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    logger.addHandler(file_handler)

    return logger
