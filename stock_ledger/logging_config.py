"""
Logging setup shared by the web process and scripts.

- Console: StreamHandler on stdout
- File: TimedRotatingFileHandler, rolled daily at midnight

Usage:
    from stock_ledger.logging_config import setup_logging
    setup_logging("web")
"""

import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from stock_ledger.config import get_settings


LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_BACKUP_COUNT = 7

# Libraries that log every query or connection at INFO
NOISY_LOGGERS = [
    "sqlalchemy.engine",
    "httpcore",
    "httpx",
    "asyncio",
    "uvicorn.access",
]


def setup_logging(
    process_name: str,
    level: str | int | None = None,
    log_dir: str | Path | None = None,
) -> logging.Logger:
    """
    Configure the root logger for a process.

    Existing root handlers are removed first, so calling this
    twice does not duplicate output.

    Args:
        process_name: used as the log file name ("web" -> web.log)
        level: overrides LOG_LEVEL from settings
        log_dir: overrides LOG_DIR from settings

    Returns:
        The configured root logger.
    """
    settings = get_settings()
    level = level if level is not None else settings.LOG_LEVEL
    log_dir = Path(log_dir if log_dir is not None else settings.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"{process_name}.log"

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    file_handler = TimedRotatingFileHandler(
        filename=log_file,
        when="midnight",
        interval=1,
        backupCount=LOG_FILE_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.suffix = "%Y-%m-%d"
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    root_logger.info(
        "Logging initialised for %s (level=%s, file=%s)",
        process_name, logging.getLevelName(root_logger.level), log_file,
    )
    return root_logger
