"""Logging setup for the dashboard and its simulation layer."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

DEFAULT_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s'
DEFAULT_DATEFMT = '%Y-%m-%d %H:%M:%S'


def setup_logging(
        level: int = logging.INFO,
        log_file: Optional[str] = None,
        max_bytes: int = 10 * 1024 * 1024,  # 10 MB
        backup_count: int = 5,
        format_str: str = DEFAULT_FORMAT,
        datefmt: str = DEFAULT_DATEFMT
) -> logging.Logger:
    """Configure the root logger with a console handler and optional rotating file."""
    logger = logging.getLogger()
    logger.setLevel(level)

    formatter = logging.Formatter(format_str, datefmt)

    logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(level)
    logger.addHandler(console_handler)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            filename=path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        logger.addHandler(file_handler)

    return logger
