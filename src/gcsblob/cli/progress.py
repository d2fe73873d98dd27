"""Rich transfer progress driven by provider progress events.

The provider reports dict events while it streams bytes (see
:class:`~gcsblob.core.protocols.BlobstoreProvider`); this module renders
them as a Rich progress bar on stderr.  The infra layer never touches
Rich — it only forwards the event dicts.

Design
------
* :class:`RichTransferProgress` owns a Rich ``Progress`` context.
* :meth:`__call__` is the callback handed to the service.
* Calls before :meth:`start` or after :meth:`stop` are ignored.
"""

from __future__ import annotations

import importlib.util
from typing import Any

from gcsblob.cli.console import get_rich_console, stderr_is_terminal
from gcsblob.exceptions import EnvironmentError

_MAX_LABEL_CHARS: int = 50


def progress_enabled() -> bool:
    """Show progress only on an interactive stderr with Rich installed."""
    return stderr_is_terminal() and importlib.util.find_spec("rich") is not None


class RichTransferProgress:
    """Callable progress hook rendering uploads and downloads.

    Usage::

        with RichTransferProgress() as hook:
            service.get("remote-blob", sink, progress_callback=hook)
    """

    def __init__(self) -> None:
        try:
            from rich.progress import (
                BarColumn,
                DownloadColumn,
                Progress,
                SpinnerColumn,
                TextColumn,
                TimeRemainingColumn,
                TransferSpeedColumn,
            )
        except ModuleNotFoundError as exc:
            raise EnvironmentError(
                "rich is not installed. Install with: pip install rich",
            ) from exc

        self._progress: Any = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            DownloadColumn(),
            TransferSpeedColumn(),
            TimeRemainingColumn(),
            console=get_rich_console(),
            transient=True,
        )
        self._task_id: Any = None
        self._started: bool = False

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> RichTransferProgress:
        self.start()
        return self

    def __exit__(self, *_args: object) -> None:
        self.stop()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        if not self._started:
            self._progress.start()
            self._started = True

    def stop(self) -> None:
        """Stop the display (idempotent)."""
        if self._started:
            self._progress.stop()
            self._started = False

    # ------------------------------------------------------------------
    # Hook callback
    # ------------------------------------------------------------------

    def __call__(self, event: dict[str, Any]) -> None:
        """Provider progress callback.

        Parameters
        ----------
        event:
            A dict with a ``"status"`` key of ``"transferring"`` or
            ``"finished"``.  Other statuses are ignored.
        """
        if not self._started:
            return

        status = event.get("status", "")
        if status == "transferring":
            self._handle_transferring(event)
        elif status == "finished":
            self._handle_finished()

    def _handle_transferring(self, event: dict[str, Any]) -> None:
        total = event.get("total_bytes")
        transferred = int(event.get("transferred_bytes") or 0)

        if self._task_id is None:
            label = str(event.get("name") or "transfer")
            if len(label) > _MAX_LABEL_CHARS:
                label = "..." + label[-(_MAX_LABEL_CHARS - 3):]
            self._task_id = self._progress.add_task(label, total=total)

        if total is not None:
            self._progress.update(self._task_id, total=total, completed=transferred)
        else:
            self._progress.update(self._task_id, completed=transferred)

    def _handle_finished(self) -> None:
        if self._task_id is None:
            return
        task = self._progress.tasks[self._task_id]
        if task.total is not None:
            self._progress.update(self._task_id, completed=task.total)
