"""Logging setup: rotating application log plus a dedicated HTTP call log."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

APP_LOG_NAME = "sagascript.log"
HTTP_LOG_NAME = "http_calls.log"
HTTP_LOGGER = "api.api_client"

_MAX_BYTES = 10 * 1024 * 1024
_BACKUP_COUNT = 5

# Libraries that log every request at INFO
_NOISY_LOGGERS = ("httpx", "httpcore")


def _rotating_handler(path: Path, level: int, formatter: logging.Formatter) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        str(path),
        maxBytes=_MAX_BYTES,
        backupCount=_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    level: int = logging.INFO,
    log_dir: Optional[str | Path] = None,
    console_enabled: bool = True,
) -> Path:
    """Configure the root logger for the CLI and library use.

    Safe to call more than once: handlers installed by a previous call are
    replaced, not duplicated.

    Args:
        level: Level for the console and ``sagascript.log``.
        log_dir: Directory for log files. Defaults to ./data/logs.
        console_enabled: Also log to stderr.

    Returns:
        The resolved log directory.
    """
    log_dir = Path(log_dir or "./data/logs")
    log_dir.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    if console_enabled:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    root_logger.addHandler(_rotating_handler(log_dir / APP_LOG_NAME, level, formatter))

    # Request/response lines always go to their own file, whatever the root level
    http_logger = logging.getLogger(HTTP_LOGGER)
    http_logger.handlers.clear()
    http_logger.setLevel(logging.DEBUG)
    http_logger.addHandler(_rotating_handler(log_dir / HTTP_LOG_NAME, logging.DEBUG, formatter))

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    logging.getLogger(__name__).debug("Logging initialized: level=%s, dir=%s", level, log_dir)
    return log_dir
