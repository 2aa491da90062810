"""
Panelsmith Logging Configuration

One ``panelsmith`` logger tree for the service, job pipelines and capability
clients. Modules ask for ``get_logger("area.module")``; handlers live only on
the root of the tree.
"""

import logging
import sys
from enum import Enum
from pathlib import Path
from typing import Optional, Union


class LogLevel(Enum):
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL

    @classmethod
    def from_name(cls, name: str) -> "LogLevel":
        """Case-insensitive lookup (``"info"``, ``"WARNING"``); unknown names give INFO."""
        return cls.__members__.get((name or "").upper(), cls.INFO)


DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
VERBOSE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(funcName)s | %(message)s"

ROOT_LOGGER_NAME = "panelsmith"

# Client libraries that log every HTTP request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "openai")

_initialized: bool = False


def setup_logging(
    level: Union[LogLevel, str] = LogLevel.INFO,
    log_file: Optional[Path] = None,
    verbose: bool = False,
    console_output: bool = True
) -> None:
    """
    Configure the ``panelsmith`` logger tree. Safe to call again; handlers are replaced.

    Args:
        level: Minimum level, as a LogLevel or its name
        log_file: Also append to this file
        verbose: Add line number and function to each record
        console_output: Write to stdout
    """
    global _initialized

    if isinstance(level, str):
        level = LogLevel.from_name(level)

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level.value)
    root_logger.handlers.clear()

    formatter = logging.Formatter(
        VERBOSE_FORMAT if verbose else DEFAULT_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handlers = []
    if console_output:
        handlers.append(logging.StreamHandler(sys.stdout))
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    # Request lines from the capability clients only when debugging
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(
            logging.DEBUG if level is LogLevel.DEBUG else logging.WARNING
        )

    _initialized = True
    root_logger.debug(f"Logging initialized - level {level.name}, verbose {verbose}")


def get_logger(name: str) -> logging.Logger:
    """Logger ``panelsmith.<name>``; sets up default logging on first use."""
    if not _initialized:
        setup_logging()
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
