"""Stderr console with optional Rich rendering.

stdout is reserved for command output (the URL printed by ``sign``), so
every diagnostic goes through this stderr console.  Rich is imported
lazily so ``-help`` and ``-v`` keep working without it.
"""

from __future__ import annotations

import re
import sys
from typing import Any

from gcsblob.exceptions import EnvironmentError

_MARKUP_RE = re.compile(r"\[/?[a-z ]+\]")


def _load_rich_console_class() -> type[Any]:
    """Return ``rich.console.Console`` or raise ``EnvironmentError``."""
    try:
        from rich.console import Console
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "rich is not installed. Install with: pip install rich",
        ) from exc
    return Console


def get_rich_console() -> Any:
    """Create a Rich console instance targeting stderr."""
    console_class = _load_rich_console_class()
    return console_class(stderr=True, highlight=False)


def stderr_is_terminal() -> bool:
    return sys.stderr.isatty()


class _StderrConsole:
    """``print``-compatible proxy, Rich when available else plain stderr."""

    def print(self, *objects: object) -> None:
        try:
            rich_console = get_rich_console()
        except EnvironmentError:
            plain = (_MARKUP_RE.sub("", str(obj)) for obj in objects)
            print(*plain, file=sys.stderr)
            return
        rich_console.print(*objects)

    def report(self, label: str, message: str, *, style: str = "bold red") -> None:
        """Print ``label`` styled and *message* verbatim (no markup parsing)."""
        try:
            rich_console = get_rich_console()
        except EnvironmentError:
            print(label, message, file=sys.stderr)
            return
        from rich.text import Text

        rich_console.print(Text.assemble((label, style), " ", message))


console = _StderrConsole()
