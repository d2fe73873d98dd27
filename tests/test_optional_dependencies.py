"""Regression tests for the optional Rich UI dependency.

Help, version and plain transfers must work when Rich is missing; error
reporting falls back to plain stderr text.
"""

from __future__ import annotations

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from gcsblob.cli import app as app_module
from gcsblob.cli import exit_codes
from gcsblob.cli.app import main
from gcsblob.exceptions import EnvironmentError, UsageError


def _hide_rich(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setitem(sys.modules, "rich", None)
    monkeypatch.setitem(sys.modules, "rich.console", None)
    monkeypatch.setitem(sys.modules, "rich.text", None)
    monkeypatch.setitem(sys.modules, "rich.progress", None)
    monkeypatch.setitem(sys.modules, "rich.logging", None)


def test_help_works_without_rich(monkeypatch: pytest.MonkeyPatch) -> None:
    _hide_rich(monkeypatch)

    with pytest.raises(SystemExit) as exc_info:
        main(["-help"])
    assert exc_info.value.code == 0


def test_version_works_without_rich(monkeypatch: pytest.MonkeyPatch) -> None:
    _hide_rich(monkeypatch)

    with pytest.raises(SystemExit) as exc_info:
        main(["-v"])
    assert exc_info.value.code == 0


def test_put_works_without_rich_on_terminal(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    fake_service: MagicMock,
) -> None:
    _hide_rich(monkeypatch)
    monkeypatch.setattr("gcsblob.cli.progress.stderr_is_terminal", lambda: True)
    src = tmp_path / "file.txt"
    src.write_bytes(b"hello")

    assert main(["-b", "bucket", "put", str(src), "remote"]) == exit_codes.SUCCESS
    assert fake_service.put.call_args.kwargs["progress_callback"] is None


def test_progress_hook_errors_cleanly_without_rich(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    _hide_rich(monkeypatch)
    from gcsblob.cli.progress import RichTransferProgress

    with pytest.raises(EnvironmentError, match="rich is not installed"):
        RichTransferProgress()


@pytest.mark.usefixtures("restore_package_logger")
class TestPlainErrorReporting:
    def _run_cli(self, monkeypatch: pytest.MonkeyPatch, exc: BaseException) -> int:
        def _raise(argv: list[str] | None = None) -> int:
            raise exc

        monkeypatch.setattr(app_module, "main", _raise)
        with pytest.raises(SystemExit) as exc_info:
            app_module.cli()
        return int(exc_info.value.code)

    def test_domain_error_printed_plainly(
        self,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        _hide_rich(monkeypatch)
        code = self._run_cli(
            monkeypatch, UsageError("put expects 2 arguments, got 1", hint="see usage"),
        )
        assert code == exit_codes.GENERAL_ERROR
        err = capsys.readouterr().err
        assert "Error: put expects 2 arguments, got 1" in err
        assert "Hint: see usage" in err

    def test_interrupt_markup_stripped(
        self,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        _hide_rich(monkeypatch)
        code = self._run_cli(monkeypatch, KeyboardInterrupt())
        assert code == exit_codes.KEYBOARD_INTERRUPT
        err = capsys.readouterr().err
        assert "Aborted by user." in err
        assert "[yellow]" not in err
