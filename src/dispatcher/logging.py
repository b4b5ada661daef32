from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterable


LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
LOG_LEVEL_ENV = "PUBTASK_LOG_LEVEL"

# Logger namespaces owned by this project; file logging is attached to these
PROJECT_LOGGERS = ("dispatcher", "tasks")

_configured = False


def _level_from_env() -> int:
    level = os.getenv(LOG_LEVEL_ENV, "INFO").upper()
    return getattr(logging, level, logging.INFO)


def _ensure_base_logger() -> None:
    global _configured
    if _configured:
        return
    level = _level_from_env()
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # basicConfig is a no-op when the root logger already has handlers
    for name in PROJECT_LOGGERS:
        logging.getLogger(name).setLevel(level)
    _configured = True


def _has_file_handler(logger: logging.Logger, log_file: Path) -> bool:
    target = str(log_file.resolve())
    return any(
        isinstance(h, RotatingFileHandler) and h.baseFilename == target
        for h in logger.handlers
    )


def get_logger(name: str, log_file: Path | None = None) -> logging.Logger:
    _ensure_base_logger()
    logger = logging.getLogger(name)
    if log_file and not _has_file_handler(logger, log_file):
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(log_file, maxBytes=1_000_000, backupCount=3)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return logger


def log_to_file(log_file: Path, names: Iterable[str] = PROJECT_LOGGERS) -> None:
    """Mirror every project logger into a rotating log file."""
    for name in names:
        get_logger(name, log_file=log_file)
