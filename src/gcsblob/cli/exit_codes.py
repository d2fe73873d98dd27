"""Exit-code constants used by the CLI layer.

Every exit path uses one of these values.
"""

from __future__ import annotations

SUCCESS: int = 0
"""Command completed without error (``exists``: the blob is present)."""

GENERAL_ERROR: int = 1
"""A known GcsBlobError was caught. User-facing message was displayed."""

UNEXPECTED_ERROR: int = 2
"""Argument syntax error, or an exception escaped all error boundaries."""

BLOB_NOT_FOUND: int = 3
"""``exists`` was asked about a blob that is not in the bucket."""

KEYBOARD_INTERRUPT: int = 130
"""User pressed Ctrl+C.  Follows POSIX convention (128 + SIGINT=2)."""
