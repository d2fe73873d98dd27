"""CLI application entry point and command routing for gcsblob.

This module is the **sole error boundary** for the entire application.
:func:`cli` catches :class:`~gcsblob.exceptions.GcsBlobError`,
``KeyboardInterrupt`` and any unexpected ``Exception``, renders a
message on stderr and exits with a well-defined code.

Architecture notes
------------------
* No storage logic lives here — remote calls go through
  :class:`~gcsblob.core.blobstore_service.BlobstoreService`.
* This layer owns local files: it opens sources and destinations and
  closes them after the service returns.
* stdout carries command output only (the URL printed by ``sign``).
"""

from __future__ import annotations

import argparse
import contextlib
import logging
import os
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any, BinaryIO

from gcsblob.cli import exit_codes
from gcsblob.cli.console import console
from gcsblob.core.config import build_config, parse_config_json
from gcsblob.core.models import BlobstoreConfig
from gcsblob.exceptions import ConfigError, GcsBlobError, LocalFileError, UsageError
from gcsblob.version import __version__

logger = logging.getLogger(__name__)

USAGE_EXAMPLES = """
# Usage
gcsblob -help

# Upload a blob to the GCS blobstore.
gcsblob -b bucket put <path/to/file> <remote-blob>

# Upload a gzip-compressed blob (stored with Content-Encoding: gzip).
gcsblob -b bucket -z put <path/to/file> <remote-blob>

# Fetch a blob from the GCS blobstore.
# Destination file will be overwritten if exists.
gcsblob -b bucket get <remote-blob> <path/to/file>

# Remove a blob from the GCS blobstore.
gcsblob -b bucket delete <remote-blob>

# Checks if blob exists in the GCS blobstore.
# Exit status is 0 if it exists and 3 if it does not.
gcsblob -b bucket exists <remote-blob>

# Generate a signed url for an object.
# If an encryption key is present in config, the appropriate headers are
# signed; users of the signed url must include them in their request.
# Where:
# - <http action> is GET, PUT, or DELETE
# - <expiry> is a duration string of at most 7 days (e.g. "6h")
# eg gcsblob -b bucket sign blobid PUT 24h
gcsblob -b bucket sign <remote-blob> <http action> <expiry>"""

_ARITY: dict[str, int] = {
    "put": 2,
    "get": 2,
    "delete": 1,
    "exists": 1,
    "sign": 3,
}

_OPERANDS: dict[str, str] = {
    "put": "<src> <dst>",
    "get": "<src> <dst>",
    "delete": "<id>",
    "exists": "<id>",
    "sign": "<id> <GET|PUT|DELETE> <duration>",
}


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    """Construct the argument parser.

    Long flags take a single dash (``-storage-class``, ``-help``);
    ``--help`` is accepted too.  Option parsing stops at the verb, so
    operands may start with ``-`` (blob ids such as ``-name``, or ``-1h``).
    """
    parser = argparse.ArgumentParser(
        prog="gcsblob",
        description="Google Cloud Storage blobstore client.",
        epilog=USAGE_EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
        allow_abbrev=False,
    )
    parser.add_argument(
        "-v",
        action="version",
        version=f"version {__version__}",
        help="Print CLI version",
    )
    parser.add_argument(
        "-h",
        "-help",
        "--help",
        action="help",
        help="Print this help text",
    )
    parser.add_argument(
        "-b",
        dest="bucket",
        default="",
        metavar="BUCKET",
        help="GCS bucket name",
    )
    parser.add_argument(
        "-storage-class",
        dest="storage_class",
        default="",
        metavar="CLASS",
        help="GCS storage class (defaults to bucket settings)",
    )
    parser.add_argument(
        "-z",
        dest="compress",
        action="store_true",
        help="Compress objects with gzip when uploading",
    )
    parser.add_argument(
        "-c",
        dest="config_path",
        default=None,
        metavar="PATH",
        help="Path to a JSON config file; flags override its values",
    )
    parser.add_argument(
        "command",
        nargs="?",
        default=None,
        metavar="COMMAND",
        help="One of: put, get, delete, exists, sign",
    )
    parser.add_argument(
        "operands",
        nargs=argparse.REMAINDER,
        metavar="ARG",
        help="Command arguments",
    )
    return parser


def _check_arity(command: str, operands: list[str]) -> None:
    """Raise :class:`UsageError` for an unknown verb or wrong operand count."""
    expected = _ARITY.get(command)
    if expected is None:
        raise UsageError(
            f"unknown command: '{command}'",
            hint="Commands are: " + ", ".join(_ARITY),
        )
    if len(operands) != expected:
        noun = "argument" if expected == 1 else "arguments"
        raise UsageError(
            f"{command} expects {expected} {noun}, got {len(operands)}",
            hint=f"Usage: gcsblob -b <bucket> {command} {_OPERANDS[command]}",
        )


# ---------------------------------------------------------------------------
# Configuration and wiring
# ---------------------------------------------------------------------------

def _read_config_file(path: str) -> dict[str, Any]:
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise LocalFileError(f"opening config {path}: {exc.strerror or exc}") from exc
    try:
        return parse_config_json(text)
    except ConfigError as exc:
        raise ConfigError(f"reading config {path}: {exc}", hint=exc.hint) from exc


def _resolve_config(args: argparse.Namespace) -> BlobstoreConfig:
    """Merge the optional config file with ``-b`` and ``-storage-class``."""
    values = _read_config_file(args.config_path) if args.config_path else None
    return build_config(
        values,
        bucket=args.bucket,
        storage_class=args.storage_class,
    )


def _build_service(config: BlobstoreConfig) -> Any:
    """Wire the google-cloud-storage provider into the core service."""
    from gcsblob.core.blobstore_service import BlobstoreService
    from gcsblob.infra.gcs_provider import GcsBlobstoreProvider

    return BlobstoreService(GcsBlobstoreProvider(config))


def _open_local(path: str, mode: str) -> BinaryIO:
    try:
        return open(path, mode)  # noqa: SIM115  closed by the caller
    except OSError as exc:
        raise LocalFileError(f"opening {path}: {exc.strerror or exc}") from exc


def _transfer_progress() -> contextlib.AbstractContextManager[Any]:
    """Return a progress hook context, or a no-op one yielding ``None``."""
    from gcsblob.cli.progress import RichTransferProgress, progress_enabled

    if progress_enabled():
        return RichTransferProgress()
    return contextlib.nullcontext()


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------

def _handle_put(service: Any, operands: list[str], args: argparse.Namespace) -> int:
    """Upload a local file, optionally gzip-compressed on the fly."""
    src, dst = operands
    source = _open_local(src, "rb")
    with source, _transfer_progress() as hook:
        if args.compress:
            from gcsblob.infra.gzip_pipe import GzipPipe

            with GzipPipe(source) as compressed:
                service.put(compressed, dst, compressed=True, progress_callback=hook)
        else:
            size = os.fstat(source.fileno()).st_size
            service.put(source, dst, size=size, progress_callback=hook)
    return exit_codes.SUCCESS


def _handle_get(service: Any, operands: list[str], args: argparse.Namespace) -> int:
    """Download a blob; the destination is created or truncated first."""
    src, dst = operands
    sink = _open_local(dst, "wb")
    with sink, _transfer_progress() as hook:
        service.get(src, sink, progress_callback=hook)
    return exit_codes.SUCCESS


def _handle_delete(service: Any, operands: list[str], args: argparse.Namespace) -> int:
    service.delete(operands[0])
    return exit_codes.SUCCESS


def _handle_exists(service: Any, operands: list[str], args: argparse.Namespace) -> int:
    blob_id = operands[0]
    if service.exists(blob_id):
        return exit_codes.SUCCESS
    logger.info("blob %s does not exist", blob_id)
    return exit_codes.BLOB_NOT_FOUND


def _handle_sign(service: Any, operands: list[str], args: argparse.Namespace) -> int:
    blob_id, action, expiry = operands
    url = service.sign(blob_id, action, expiry)
    sys.stdout.write(url)
    sys.stdout.flush()
    return exit_codes.SUCCESS


_HANDLERS: dict[str, Callable[[Any, list[str], argparse.Namespace], int]] = {
    "put": _handle_put,
    "get": _handle_get,
    "delete": _handle_delete,
    "exists": _handle_exists,
    "sign": _handle_sign,
}


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the gcsblob CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.

    Returns
    -------
    int
        OS process exit code.

    Raises
    ------
    GcsBlobError
        For usage, configuration and storage failures; :func:`cli`
        renders them.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return exit_codes.SUCCESS

    command: str = args.command
    operands: list[str] = list(args.operands)
    _check_arity(command, operands)

    config = _resolve_config(args)
    service = _build_service(config)
    return _HANDLERS[command](service, operands, args)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point."""
    from gcsblob.cli.logging_setup import configure_logging

    configure_logging()
    try:
        code = main()
        sys.exit(code)
    except GcsBlobError as exc:
        logger.debug("command failed", exc_info=True)
        console.report("Error:", str(exc))
        if exc.hint:
            console.report("Hint:", exc.hint, style="yellow")
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        logger.debug("unexpected failure", exc_info=True)
        console.report(
            "Unexpected error.",
            f"Please report this issue.\n  {type(exc).__name__}: {exc}",
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
