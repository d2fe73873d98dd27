"""Core blobstore service — validates requests and drives the provider.

This service delegates every remote call to a
:class:`~gcsblob.core.protocols.BlobstoreProvider` injected at
construction time.  It is responsible for:

* Validating blob ids, signing actions and signing expiries.
* Choosing the content encoding for compressed uploads.
* Ensuring only :class:`~gcsblob.exceptions.GcsBlobError` subclasses
  escape.

Guarantees
----------
* Pure orchestration — no ``print()``, no filesystem access.  Streams are
  opened and closed by the caller.
* No google-cloud-storage import.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import timedelta
from typing import BinaryIO, TypeVar

from gcsblob.core.duration import parse_duration
from gcsblob.core.models import (
    GZIP_CONTENT_ENCODING,
    MAX_BLOB_ID_BYTES,
    MAX_SIGN_EXPIRY,
    SIGN_ACTIONS,
)
from gcsblob.core.protocols import BlobstoreProvider, ProgressCallback
from gcsblob.exceptions import (
    GcsBlobError,
    InvalidBlobIdError,
    InvalidDurationError,
    InvalidSignActionError,
    StorageOperationError,
)

T = TypeVar("T")


class BlobstoreService:
    """Stateless service mapping blobstore verbs onto a provider.

    Parameters
    ----------
    provider:
        Any object satisfying the :class:`BlobstoreProvider` protocol.
    """

    def __init__(self, provider: BlobstoreProvider) -> None:
        self._provider: BlobstoreProvider = provider

    # ------------------------------------------------------------------
    # Validation (pure)
    # ------------------------------------------------------------------

    @staticmethod
    def validate_blob_id(blob_id: str) -> None:
        """Raise :class:`InvalidBlobIdError` for unusable object names."""
        if not blob_id:
            raise InvalidBlobIdError("blob id must not be empty")
        if len(blob_id.encode("utf-8")) > MAX_BLOB_ID_BYTES:
            raise InvalidBlobIdError(
                f"blob id exceeds {MAX_BLOB_ID_BYTES} bytes",
            )

    @staticmethod
    def normalize_action(action: str) -> str:
        """Upper-case *action* and check it is GET, PUT or DELETE."""
        normalized = action.upper()
        if normalized not in SIGN_ACTIONS:
            raise InvalidSignActionError(
                f"invalid signing action: {normalized} must be GET, PUT, or DELETE",
            )
        return normalized

    @staticmethod
    def parse_expiry(expiry: str) -> timedelta:
        """Parse *expiry* and check it lies in ``(0, 7 days]``."""
        duration = parse_duration(expiry)
        if duration <= timedelta(0):
            raise InvalidDurationError(
                f"expiry must be positive, got {expiry!r}",
            )
        if duration > MAX_SIGN_EXPIRY:
            raise InvalidDurationError(
                f"expiry must be at most 7 days, got {expiry!r}",
                hint='Use a shorter duration such as "24h".',
            )
        return duration

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def put(
        self,
        stream: BinaryIO,
        dst: str,
        *,
        compressed: bool = False,
        size: int | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> None:
        """Upload *stream* as blob *dst*.

        Parameters
        ----------
        stream:
            Readable binary stream.  When *compressed* is true it must
            already yield gzip data.
        dst:
            Destination blob id.
        compressed:
            Store the object with ``Content-Encoding: gzip``.
        size:
            Number of bytes *stream* will yield, when known.
        progress_callback:
            Optional callable forwarded to the provider.
        """
        self.validate_blob_id(dst)
        content_encoding = GZIP_CONTENT_ENCODING if compressed else None
        self._call(
            "put",
            lambda: self._provider.put(
                stream,
                dst,
                content_encoding=content_encoding,
                size=size,
                progress_callback=progress_callback,
            ),
        )

    def get(
        self,
        src: str,
        sink: BinaryIO,
        *,
        progress_callback: ProgressCallback | None = None,
    ) -> None:
        """Download blob *src* into *sink*."""
        self.validate_blob_id(src)
        self._call(
            "get",
            lambda: self._provider.get(src, sink, progress_callback=progress_callback),
        )

    def delete(self, blob_id: str) -> None:
        """Delete blob *blob_id*."""
        self.validate_blob_id(blob_id)
        self._call("delete", lambda: self._provider.delete(blob_id))

    def exists(self, blob_id: str) -> bool:
        """Return whether blob *blob_id* exists."""
        self.validate_blob_id(blob_id)
        return bool(self._call("exists", lambda: self._provider.exists(blob_id)))

    def sign(self, blob_id: str, action: str, expiry: str) -> str:
        """Return a signed URL for *action* on *blob_id* valid for *expiry*.

        Raises
        ------
        InvalidSignActionError
            If *action* is not GET, PUT or DELETE (case-insensitive).
        InvalidDurationError
            If *expiry* is malformed, not positive, or longer than 7 days.
        """
        self.validate_blob_id(blob_id)
        normalized = self.normalize_action(action)
        duration = self.parse_expiry(expiry)
        return str(
            self._call(
                "sign",
                lambda: self._provider.sign(blob_id, normalized, duration),
            )
        )

    # ------------------------------------------------------------------
    # Provider delegation (safe boundary)
    # ------------------------------------------------------------------

    @staticmethod
    def _call(operation: str, func: Callable[[], T]) -> T:
        """Run *func* and ensure only our exceptions escape."""
        try:
            return func()
        except GcsBlobError:
            raise
        except Exception as exc:
            raise StorageOperationError(
                f"performing operation {operation}: {exc}",
            ) from exc
