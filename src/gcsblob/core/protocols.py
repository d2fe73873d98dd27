"""Protocols (interfaces) consumed by the core layer.

These define the contract that storage adapters must satisfy.  Core code
depends ONLY on this protocol — never on the concrete SDK-backed
implementation.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import timedelta
from typing import Any, BinaryIO, Protocol

ProgressCallback = Callable[[dict[str, Any]], None]


class BlobstoreProvider(Protocol):
    """Contract for object-storage backends.

    Implementations must map all backend-specific exceptions to
    :class:`~gcsblob.exceptions.GcsBlobError` subclasses.

    Progress callbacks receive dicts with a ``"status"`` key:

    * ``"transferring"`` — also ``"name"``, ``"transferred_bytes"`` and
      ``"total_bytes"`` (``None`` when unknown).
    * ``"finished"`` — also ``"name"``.
    """

    def put(
        self,
        stream: BinaryIO,
        name: str,
        *,
        content_encoding: str | None = None,
        size: int | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> None:
        """Upload everything readable from *stream* as blob *name*.

        Raises
        ------
        ReadOnlyClientError
            When the provider holds anonymous credentials.
        StorageOperationError
            When the upload fails.
        """
        ...  # pragma: no cover

    def get(
        self,
        name: str,
        sink: BinaryIO,
        *,
        progress_callback: ProgressCallback | None = None,
    ) -> None:
        """Write the content of blob *name* into *sink*.

        Raises
        ------
        BlobNotFoundError
            When the blob does not exist.
        """
        ...  # pragma: no cover

    def delete(self, name: str) -> None:
        """Delete blob *name*.  Deleting an absent blob is not an error."""
        ...  # pragma: no cover

    def exists(self, name: str) -> bool:
        """Return whether blob *name* exists."""
        ...  # pragma: no cover

    def sign(self, name: str, action: str, expiry: timedelta) -> str:
        """Return a signed URL allowing *action* on *name* for *expiry*.

        Raises
        ------
        SigningError
            When the credentials cannot produce a signature.
        """
        ...  # pragma: no cover
