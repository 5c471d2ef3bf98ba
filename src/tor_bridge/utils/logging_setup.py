"""
Logging setup for Tor Bridge

Console output goes to stderr so the CLI report on stdout stays clean.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

ROOT_LOGGER = 'tor_bridge'

CONSOLE_FORMAT = '%(asctime)s %(levelname)-7s %(message)s'
FILE_FORMAT = '%(asctime)s %(levelname)-7s [%(name)s] %(message)s'

# Each readiness check goes through requests/urllib3
QUIET_LOGGERS = ('urllib3', 'requests')


def _parse_level(level: str) -> int:
    value = logging.getLevelName(str(level).strip().upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return value


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    max_bytes: int = 10485760,
    backup_count: int = 5
) -> logging.Logger:
    """Configure the tor_bridge logger. Calling it again replaces the previous handlers."""
    threshold = _parse_level(level)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(min(threshold, logging.DEBUG) if log_file else threshold)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(threshold)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        rotating = RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count, encoding='utf-8')
        rotating.setLevel(logging.DEBUG)
        rotating.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(rotating)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    suffix = f", file {log_file}" if log_file else ""
    logger.debug(f"Logging configured at {logging.getLevelName(threshold)}{suffix}")
    return logger


def get_logger(name: str) -> logging.Logger:
    """Child of the tor_bridge logger"""
    return logging.getLogger(f'{ROOT_LOGGER}.{name}')
