import logging
import sys
from datetime import datetime

logger = logging.getLogger("chef-backup")

BACKUP_TIME_FORMAT = "%Y-%m-%d-%H-%M-%S"


def generate_backup_time() -> str:
    """Timestamp shared by every artifact name of one backup run."""
    return datetime.now().strftime(BACKUP_TIME_FORMAT)


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach a stdout handler to the package logger.

    The handler is app-managed: existing handlers are replaced and records do
    not propagate to the root logger.
    """
    logger.setLevel(level.upper())
    logger.propagate = False
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level.upper())
    formatter = logging.Formatter(
        '%(asctime)s - [%(name)s] - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger
