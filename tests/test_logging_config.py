"""Tests for logging setup."""

import logging
from logging.handlers import TimedRotatingFileHandler

import pytest

from pocketledger.logging_config import LOG_LEVEL_ENV, remove_handlers, resolve_level, setup_logging


def _installed_handlers():
    return [h for h in logging.getLogger().handlers if getattr(h, "_pocketledger", False)]


def test_resolve_level_names_and_numbers():
    assert resolve_level("debug") == logging.DEBUG
    assert resolve_level(" Info ") == logging.INFO
    assert resolve_level(logging.ERROR) == logging.ERROR


def test_resolve_level_from_environment(monkeypatch):
    monkeypatch.setenv(LOG_LEVEL_ENV, "error")
    assert resolve_level() == logging.ERROR

    monkeypatch.delenv(LOG_LEVEL_ENV)
    assert resolve_level() == logging.WARNING


def test_resolve_level_unknown():
    with pytest.raises(ValueError, match="Unknown log level"):
        resolve_level("chatty")


def test_setup_logging_replaces_own_handlers():
    setup_logging("INFO")
    setup_logging("DEBUG")

    handlers = _installed_handlers()
    assert len(handlers) == 1
    assert handlers[0].level == logging.DEBUG
    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING


def test_setup_logging_with_file(tmp_path):
    log_file = tmp_path / "logs" / "pocketledger.log"

    setup_logging("INFO", log_file=log_file)
    logging.getLogger("pocketledger.test").info("hello file")

    file_handlers = [h for h in _installed_handlers() if isinstance(h, TimedRotatingFileHandler)]
    assert len(file_handlers) == 1
    file_handlers[0].flush()
    content = log_file.read_text(encoding="utf-8")
    assert "| INFO     | pocketledger.test | hello file" in content


def test_remove_handlers_keeps_foreign_handlers():
    foreign = logging.NullHandler()
    root = logging.getLogger()
    root.addHandler(foreign)
    try:
        setup_logging("INFO")
        remove_handlers()

        assert _installed_handlers() == []
        assert foreign in root.handlers
    finally:
        root.removeHandler(foreign)
