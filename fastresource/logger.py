# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

import logging
import os
import sys

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fastresource.config import BaseSettings


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogOutput(str, Enum):
    CONSOLE = "console"
    FILE = "file"
    BOTH = "both"


class LogFormat(str, Enum):
    TEXT_LIGHT = "text_light"
    TEXT = "text"
    KEY_VALUE = "key_value"


LOG_FORMATS: dict[LogFormat, str] = {
    LogFormat.TEXT_LIGHT: "%(levelname)s: %(message)s",
    LogFormat.TEXT: "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    LogFormat.KEY_VALUE: "time=%(asctime)s level=%(levelname)s logger=%(name)s message=%(message)s",
}

ROOT_LOGGER_NAME = "fastresource"


def get_format(log_format: LogFormat | str) -> str:
    """Return the logging format string, custom strings are used as-is."""
    if isinstance(log_format, LogFormat):
        return LOG_FORMATS[log_format]

    return log_format


def setup_logging(settings: "BaseSettings") -> logging.Logger:
    """
    Configure the ``fastresource`` logger hierarchy from the settings.

    Handlers previously installed by this function are replaced, so it can
    safely be called again after the settings change.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(settings.log_level.value)

    for handler in list(logger.handlers):
        if getattr(handler, "_fastresource", False):
            logger.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(get_format(settings.log_format))
    handlers: list[logging.Handler] = []

    if settings.log_output in (LogOutput.CONSOLE, LogOutput.BOTH):
        handlers.append(logging.StreamHandler(sys.stderr))

    if settings.log_output in (LogOutput.FILE, LogOutput.BOTH):
        os.makedirs(os.path.dirname(settings.log_path) or ".", exist_ok=True)
        handlers.append(logging.FileHandler(settings.log_path, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)
        handler._fastresource = True  # type: ignore[attr-defined]
        logger.addHandler(handler)

    return logger


__all__ = [
    "LogLevel",
    "LogOutput",
    "LogFormat",
    "get_format",
    "setup_logging",
]
