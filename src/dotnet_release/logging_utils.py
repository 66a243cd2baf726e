# src/dotnet_release/logging_utils.py
# =============================================================================
# Logging setup for the dotnet-release CLI.
#
#   logger = init_logger("logs/release.log", level="DEBUG", rich=True)
#
# Rich console handler when attached to a TTY, plain StreamHandler otherwise,
# optional plain-format file handler. Repeated calls never duplicate handlers.
# =============================================================================

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Union

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "dotnet_release"

_LOGGER_CACHE: Dict[str, logging.Logger] = {}
_CONSOLE: Optional[Console] = None


def _is_tty(stream: Any) -> bool:
    try:
        return bool(stream.isatty())
    except (AttributeError, ValueError):
        return False


def _fmt_plain() -> logging.Formatter:
    # timestamp | level | name | message
    return logging.Formatter(fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s", datefmt="%H:%M:%S")


def _level(level: str) -> int:
    return getattr(logging, level.upper(), logging.INFO)


def init_logger(
    file_path: Optional[Union[str, Path]] = None,
    *,
    level: str = "INFO",
    rich: bool = True,
    name: str = ROOT_LOGGER,
) -> logging.Logger:
    """
    Initialize the package logger.

    Args
    ----
    file_path: optional log file (parent dirs are created)
    level:     logging level string ("DEBUG", "INFO", ...)
    rich:      use RichHandler when stdout is a TTY
    name:      logger name

    A second call only adjusts the level of the cached logger and its handlers.
    """
    global _CONSOLE
    if name in _LOGGER_CACHE:
        logger = _LOGGER_CACHE[name]
        logger.setLevel(_level(level))
        for handler in logger.handlers:
            handler.setLevel(_level(level))
        return logger

    logger = logging.getLogger(name)
    logger.setLevel(_level(level))
    logger.propagate = False

    if not logger.handlers:
        if rich and _is_tty(sys.stdout):
            _CONSOLE = Console(stderr=True, highlight=True)
            ch: logging.Handler = RichHandler(
                console=_CONSOLE, show_time=False, show_level=True, show_path=False, markup=False
            )
        else:
            ch = logging.StreamHandler(sys.stderr)
            ch.setFormatter(_fmt_plain())
        ch.setLevel(_level(level))
        logger.addHandler(ch)

        if file_path:
            path = Path(file_path)
            path.parent.mkdir(parents=True, exist_ok=True)
            fh = logging.FileHandler(str(path), mode="a", encoding="utf-8")
            fh.setLevel(_level(level))
            fh.setFormatter(_fmt_plain())
            logger.addHandler(fh)

    _LOGGER_CACHE[name] = logger
    return logger


def get_logger(name: str) -> logging.Logger:
    """Child logger under the package root; handlers come from init_logger()."""
    if name in _LOGGER_CACHE:
        return _LOGGER_CACHE[name]
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


def reset_loggers() -> None:
    """Drop cached handlers (used between CLI invocations in tests)."""
    global _CONSOLE
    for logger in _LOGGER_CACHE.values():
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        logger.setLevel(logging.NOTSET)
        logger.propagate = True
    _LOGGER_CACHE.clear()
    _CONSOLE = None
