# miroku/common/logging.py
from __future__ import annotations

import logging

from miroku.common.settings import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# per-request INFO lines from the HTTP client drown out the refresh logs
_CHATTY = ("httpx", "httpcore")


def _configure_root(level: int | str) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
    for name in _CHATTY:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str = "uvicorn.error", level: int | str | None = None) -> logging.Logger:
    """
    Logger for `name` at the configured LOG_LEVEL.

    Under uvicorn the root logger already has handlers and is left alone;
    otherwise (scripts, tests) a basicConfig is installed once.
    """
    level = level if level is not None else get_settings().log_level.upper()
    logger = logging.getLogger(name)
    if not logging.getLogger().handlers and not logger.handlers:
        _configure_root(level)
    logger.setLevel(level)
    return logger
