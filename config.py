"""Runtime settings for the habit service, read from the environment."""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

DEFAULT_PORT = 5566
DEFAULT_DATA_PATH = "data/habits.json"
TIMEOUT_MS = int(os.getenv("HABIT_SERVICE_TIMEOUT_MS", "1500"))

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_TRUTHY = {"1", "true", "yes", "on"}

# Handlers installed by setup_logging, replaced on the next call
_installed_handlers = []


def service_port() -> int:
    return int(os.getenv("HABIT_SERVICE_PORT", str(DEFAULT_PORT)))


def data_path() -> str:
    return os.getenv("HABIT_DATA_PATH", DEFAULT_DATA_PATH)


def count_creation_day() -> bool:
    """Whether a habit already counts on the day it was registered."""
    return os.getenv("HABIT_COUNT_CREATION_DAY", "").strip().lower() in _TRUTHY


def setup_logging(log_file=None, level=None, max_bytes: int = 10_000_000, backup_count: int = 5):
    log_file = log_file or os.getenv("HABIT_LOG_FILE")
    level = level or os.getenv("HABIT_LOG_LEVEL", "INFO")

    logger = logging.getLogger()
    logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT)

    while _installed_handlers:
        old = _installed_handlers.pop()
        logger.removeHandler(old)
        old.close()

    stream = logging.StreamHandler()
    stream.setFormatter(formatter)
    logger.addHandler(stream)
    _installed_handlers.append(stream)

    if log_file:
        Path(log_file).parent.mkdir(exist_ok=True, parents=True)
        handler = RotatingFileHandler(
            log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        _installed_handlers.append(handler)
    return logger
