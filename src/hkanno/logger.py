from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from .utils import ensure_dir

LOG_FORMAT = "%(asctime)s %(levelname)s %(filename)s:%(lineno)d: %(message)s"
DEFAULT_LOG_DIR = "./logs"
MAX_LOG_COUNT = 4

_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class LogLevelHandle:
    """Changes the verbosity of the logger set up by ``init``."""

    def __init__(self, logger: logging.Logger, handler: logging.Handler) -> None:
        self.logger = logger
        self.handler = handler

    def change_level(self, level: str) -> int:
        new_level = _LEVELS.get(level.strip().lower())
        if new_level is None:
            self.logger.warning("Unknown log level: %s. Fallback to `error`", level)
            new_level = logging.ERROR
        self.logger.setLevel(new_level)
        return new_level

    def close(self) -> None:
        self.logger.removeHandler(self.handler)
        self.handler.close()


def init(
    log_dir: str = DEFAULT_LOG_DIR,
    log_name: str = "hkanno.log",
    *,
    max_log_count: int = MAX_LOG_COUNT,
    level: str = "debug",
    logger_name: Optional[str] = "hkanno",
) -> LogLevelHandle:
    """
    Log to ``log_dir/log_name``, starting a fresh file on every call.

    Older files are kept as ``log_name.1`` ... up to ``max_log_count`` files
    in total.
    """
    ensure_dir(log_dir)
    path = os.path.join(log_dir, log_name)
    handler = RotatingFileHandler(path, backupCount=max(0, max_log_count - 1), encoding="utf-8", delay=True)
    if os.path.exists(path) and os.path.getsize(path) > 0:
        handler.doRollover()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    logger = logging.getLogger(logger_name)
    logger.addHandler(handler)
    handle = LogLevelHandle(logger, handler)
    handle.change_level(level)
    return handle
