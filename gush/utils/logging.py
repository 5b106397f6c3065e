import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

DEFAULT_LOG_BACKUP_COUNT = 10
DEFAULT_LOG_RETENTION_SIZE = 1024 * 1024  # bytes per log file
LOGGER_NAME = 'gush'

_VERBOSITY_LEVELS = {0: logging.WARNING, 1: logging.INFO}


def verbosity_to_level(verbosity: int) -> int:
    return _VERBOSITY_LEVELS.get(verbosity, logging.DEBUG)


def setup_logging(verbosity: int = 0, log_dir: Optional[Path] = None, retention_size: int = DEFAULT_LOG_RETENTION_SIZE):
    """Configure the ``gush`` logger tree.

    Console output goes to stderr through rich; with ``log_dir`` every record
    down to DEBUG is also kept in a rotating ``gush.log``.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=verbosity > 1,
        markup=False,
    )
    console_handler.setLevel(verbosity_to_level(verbosity))
    logger.addHandler(console_handler)

    if log_dir is not None:
        try:
            os.makedirs(log_dir, exist_ok=True)
            file_handler = RotatingFileHandler(
                os.path.join(log_dir, 'gush.log'),
                maxBytes=retention_size,
                backupCount=DEFAULT_LOG_BACKUP_COUNT,
            )
        except OSError as e:
            logger.warning(f"File logging disabled, cannot write to {log_dir}: {e}")
        else:
            file_handler.setFormatter(
                logging.Formatter(
                    '%(asctime)s | %(levelname)s | %(name)s | %(message)s',
                    datefmt='%Y-%m-%d %H:%M:%S',
                )
            )
            file_handler.setLevel(logging.DEBUG)
            logger.addHandler(file_handler)

    return logger
