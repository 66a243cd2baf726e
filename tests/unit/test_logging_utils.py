# tests/unit/test_logging_utils.py
# -----------------------------------------------------------------------------
# Logging utilities.
#
# Goals:
# - Verify the package logger is configured with the requested level.
# - Ensure console + file handlers are attached and the file receives records.
# - Repeated initialization must not duplicate handlers.
# - Child loggers (module __name__ loggers) reach the package handlers.
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
from pathlib import Path

from rich.logging import RichHandler

from dotnet_release import logging_utils
from dotnet_release.logging_utils import ROOT_LOGGER, get_logger, init_logger


def _flush(logger: logging.Logger) -> None:
    for handler in logger.handlers:
        handler.flush()


def test_level_and_handlers(tmp_path: Path):
    log_file = tmp_path / "logs" / "release.log"
    logger = init_logger(log_file, level="DEBUG", rich=False)
    assert logger.name == ROOT_LOGGER
    assert logger.level == logging.DEBUG
    assert any(isinstance(h, logging.FileHandler) for h in logger.handlers)
    assert not any(isinstance(h, RichHandler) for h in logger.handlers)
    assert log_file.parent.is_dir()


def test_file_receives_child_records(tmp_path: Path):
    log_file = tmp_path / "release.log"
    logger = init_logger(log_file, level="INFO", rich=False)
    logging.getLogger("dotnet_release.nuspec").info("version 1.0 -> 1.1")
    logging.getLogger("dotnet_release.nuspec").debug("not at INFO")
    _flush(logger)
    text = log_file.read_text(encoding="utf-8")
    assert "| INFO | dotnet_release.nuspec | version 1.0 -> 1.1" in text
    assert "not at INFO" not in text


def test_repeated_init_does_not_duplicate_handlers(tmp_path: Path):
    first = init_logger(tmp_path / "a.log", level="INFO", rich=False)
    count = len(first.handlers)
    second = init_logger(tmp_path / "a.log", level="WARNING", rich=False)
    assert second is first
    assert len(second.handlers) == count
    assert second.level == logging.WARNING


def test_rich_handler_only_on_a_tty(monkeypatch):
    monkeypatch.setattr(logging_utils, "_is_tty", lambda _stream: False)
    logger = init_logger(level="INFO", rich=True)
    assert not any(isinstance(h, RichHandler) for h in logger.handlers)

    logging_utils.reset_loggers()
    monkeypatch.setattr(logging_utils, "_is_tty", lambda _stream: True)
    logger = init_logger(level="INFO", rich=True)
    assert any(isinstance(h, RichHandler) for h in logger.handlers)


def test_get_logger_namespaces_under_package():
    assert get_logger("runner").name == "dotnet_release.runner"
    assert get_logger("dotnet_release.cli").name == "dotnet_release.cli"
