"""Tests for logging configuration (cli/logging_setup.py)."""

from __future__ import annotations

import importlib.util
import logging
import sys

import pytest

from gcsblob.cli.logging_setup import (
    DEFAULT_LOG_LEVEL,
    LOG_LEVEL_ENV,
    configure_logging,
    resolve_log_level,
)


class TestResolveLogLevel:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("debug", logging.DEBUG),
            ("INFO", logging.INFO),
            (" warning ", logging.WARNING),
            ("error", logging.ERROR),
        ],
    )
    def test_known_names(self, value: str, expected: int) -> None:
        assert resolve_log_level(value) == expected

    @pytest.mark.parametrize("value", [None, "", "chatty"])
    def test_fallback(self, value: str | None) -> None:
        assert resolve_log_level(value) == DEFAULT_LOG_LEVEL


@pytest.mark.usefixtures("restore_package_logger")
class TestConfigureLogging:
    def test_level_from_argument(self) -> None:
        package_logger = configure_logging("debug")
        assert package_logger.name == "gcsblob"
        assert package_logger.level == logging.DEBUG
        assert package_logger.propagate is False

    def test_level_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(LOG_LEVEL_ENV, "info")
        assert configure_logging().level == logging.INFO

    def test_default_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)
        assert configure_logging().level == logging.WARNING

    def test_repeated_calls_keep_one_handler(self) -> None:
        configure_logging()
        package_logger = configure_logging()
        assert len(package_logger.handlers) == 1

    @pytest.mark.skipif(
        importlib.util.find_spec("rich") is None,
        reason="rich not installed",
    )
    def test_rich_handler_used(self) -> None:
        from rich.logging import RichHandler

        package_logger = configure_logging()
        assert isinstance(package_logger.handlers[0], RichHandler)

    def test_plain_handler_without_rich(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setitem(sys.modules, "rich", None)
        monkeypatch.setitem(sys.modules, "rich.console", None)
        monkeypatch.setitem(sys.modules, "rich.logging", None)
        package_logger = configure_logging()
        (handler,) = package_logger.handlers
        assert type(handler) is logging.StreamHandler
        assert handler.stream is sys.stderr
