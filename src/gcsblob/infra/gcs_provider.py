"""google-cloud-storage backed :class:`~gcsblob.core.protocols.BlobstoreProvider`.

This module is the **only** place in the codebase that imports
``google.cloud.storage``.  All SDK exceptions are caught here and
re-raised as typed :class:`~gcsblob.exceptions.GcsBlobError` subclasses —
nothing raw escapes the infrastructure boundary.
"""

from __future__ import annotations

import base64
import hashlib
import io
import json
import logging
from datetime import timedelta
from typing import Any, BinaryIO, NoReturn

from gcsblob.core.models import CREDENTIALS_NONE, CREDENTIALS_STATIC, BlobstoreConfig
from gcsblob.core.protocols import ProgressCallback
from gcsblob.exceptions import (
    BlobNotFoundError,
    CredentialsError,
    EnvironmentError,
    GcsBlobError,
    PermissionDeniedError,
    ReadOnlyClientError,
    SigningError,
    StorageOperationError,
)

logger = logging.getLogger(__name__)

# Resumable upload chunk size; must be a multiple of 256 KiB.
_UPLOAD_CHUNK_BYTES: int = 8 * 1024 * 1024

_READ_ONLY_HINT: str = (
    "The client operates in read only mode. "
    "Change the 'credentials_source' config value to use credentials."
)

_SIGNING_HINT: str = (
    "Signing requires service account credentials "
    "(credentials_source 'static' with a json_key)."
)


def _import_storage() -> Any:
    """Import google-cloud-storage lazily."""
    try:
        import google.cloud.storage as storage
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "google-cloud-storage is not installed. "
            "Install with: pip install google-cloud-storage",
        ) from exc
    return storage


def _import_api_exceptions() -> Any:
    try:
        import google.api_core.exceptions as api_exceptions
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "google-api-core is not installed. "
            "Install with: pip install google-cloud-storage",
        ) from exc
    return api_exceptions


def encryption_headers(key: bytes | None) -> dict[str, str]:
    """Return the customer-supplied-encryption headers for *key*.

    Empty when no key is configured.
    """
    if key is None:
        return {}
    return {
        "x-goog-encryption-algorithm": "AES256",
        "x-goog-encryption-key": base64.b64encode(key).decode("ascii"),
        "x-goog-encryption-key-sha256": base64.b64encode(
            hashlib.sha256(key).digest(),
        ).decode("ascii"),
    }


# ---------------------------------------------------------------------------
# Progress-reporting stream adapters
# ---------------------------------------------------------------------------

class _ProgressReader(io.RawIOBase):
    """Readable wrapper that counts bytes and reports progress.

    ``tell()`` is served from the byte count so that non-seekable sources
    (the gzip pipe) satisfy the SDK's resumable-upload bookkeeping.
    """

    def __init__(
        self,
        stream: BinaryIO,
        *,
        name: str,
        total: int | None,
        callback: ProgressCallback | None,
    ) -> None:
        super().__init__()
        self._stream = stream
        self._name = name
        self._total = total
        self._callback = callback
        self._position = 0

    def readable(self) -> bool:
        return True

    def tell(self) -> int:
        return self._position

    def read(self, size: int | None = -1) -> bytes:
        data = self._stream.read(-1 if size is None else size)
        if data:
            self._position += len(data)
            _report_transfer(self._callback, self._name, self._position, self._total)
        return data


class _ProgressWriter(io.RawIOBase):
    """Writable wrapper that counts bytes and reports progress."""

    def __init__(
        self,
        sink: BinaryIO,
        *,
        name: str,
        total: int | None,
        callback: ProgressCallback | None,
    ) -> None:
        super().__init__()
        self._sink = sink
        self._name = name
        self._total = total
        self._callback = callback
        self._position = 0

    def writable(self) -> bool:
        return True

    def write(self, data: Any) -> int:
        written = self._sink.write(data)
        count = len(data) if written is None else written
        self._position += count
        _report_transfer(self._callback, self._name, self._position, self._total)
        return count

    def flush(self) -> None:
        self._sink.flush()


def _report_transfer(
    callback: ProgressCallback | None,
    name: str,
    transferred: int,
    total: int | None,
) -> None:
    if callback is None:
        return
    callback({
        "status": "transferring",
        "name": name,
        "transferred_bytes": transferred,
        "total_bytes": total,
    })


def _report_finished(callback: ProgressCallback | None, name: str) -> None:
    if callback is not None:
        callback({"status": "finished", "name": name})


# ---------------------------------------------------------------------------
# Provider
# ---------------------------------------------------------------------------

class GcsBlobstoreProvider:
    """Concrete :class:`BlobstoreProvider` backed by google-cloud-storage.

    Usage::

        provider = GcsBlobstoreProvider(BlobstoreConfig(bucket_name="my-bucket"))
        provider.exists("some/blob")

    The storage client is created on first use from the configured
    credentials source.  Tests may inject *client* directly.
    """

    def __init__(self, config: BlobstoreConfig, *, client: Any = None) -> None:
        self._config = config
        self._client: Any = client
        self._bucket_handle: Any = None

    # ------------------------------------------------------------------
    # Client construction
    # ------------------------------------------------------------------

    def _build_client(self) -> Any:
        """Create a ``storage.Client`` for the configured credentials."""
        storage = _import_storage()
        from google.auth import exceptions as auth_exceptions

        source = self._config.credentials_source
        try:
            if source == CREDENTIALS_NONE:
                return storage.Client.create_anonymous_client()
            if source == CREDENTIALS_STATIC:
                return storage.Client.from_service_account_info(
                    json.loads(self._config.json_key),
                )
            return storage.Client()
        except auth_exceptions.DefaultCredentialsError as exc:
            raise CredentialsError(
                f"creating gcs client: {exc}",
                hint=(
                    "Run 'gcloud auth application-default login', or set "
                    "credentials_source in the config file."
                ),
            ) from exc
        except (ValueError, KeyError) as exc:
            raise CredentialsError(
                f"creating gcs client: invalid service account key: {exc}",
            ) from exc

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = self._build_client()
        return self._client

    def _bucket(self) -> Any:
        if self._bucket_handle is None:
            self._bucket_handle = self.client.bucket(self._config.bucket_name)
        return self._bucket_handle

    def _blob(self, name: str) -> Any:
        return self._bucket().blob(name, encryption_key=self._config.encryption_key)

    def _uri(self, name: str) -> str:
        return f"gs://{self._config.bucket_name}/{name}"

    def _ensure_writable(self, operation: str) -> None:
        if self._config.read_only:
            raise ReadOnlyClientError(
                f"cannot {operation} with anonymous credentials",
                hint=_READ_ONLY_HINT,
            )

    # ------------------------------------------------------------------
    # Protocol methods
    # ------------------------------------------------------------------

    def put(
        self,
        stream: BinaryIO,
        name: str,
        *,
        content_encoding: str | None = None,
        size: int | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> None:
        """Upload *stream* as *name*.

        Raises
        ------
        ReadOnlyClientError
            With anonymous credentials.
        CompressionError
            Propagated unchanged from a failing gzip pipe.
        StorageOperationError
            For any other upload failure.
        """
        self._ensure_writable("put")
        blob = self._blob(name)
        blob.chunk_size = _UPLOAD_CHUNK_BYTES
        if self._config.storage_class:
            blob.storage_class = self._config.storage_class
        if content_encoding:
            blob.content_encoding = content_encoding

        reader = _ProgressReader(
            stream,
            name=name,
            total=size,
            callback=progress_callback,
        )
        logger.debug(
            "uploading %s (size=%s, content_encoding=%s)",
            self._uri(name),
            size,
            content_encoding,
        )
        try:
            blob.upload_from_file(reader, size=size)
        except GcsBlobError:
            raise
        except Exception as exc:
            self._raise_mapped(exc, "put", name)
        _report_finished(progress_callback, name)

    def get(
        self,
        name: str,
        sink: BinaryIO,
        *,
        progress_callback: ProgressCallback | None = None,
    ) -> None:
        """Download *name* into *sink*.

        Raises
        ------
        BlobNotFoundError
            When the blob does not exist.
        StorageOperationError
            For any other download failure.
        """
        logger.debug("downloading %s", self._uri(name))
        try:
            blob = self._bucket().get_blob(
                name,
                encryption_key=self._config.encryption_key,
            )
            if blob is None:
                raise BlobNotFoundError(
                    f"{self._uri(name)} not found",
                    hint="Check the bucket name and blob id.",
                )
            writer = _ProgressWriter(
                sink,
                name=name,
                total=blob.size,
                callback=progress_callback,
            )
            blob.download_to_file(writer)
        except GcsBlobError:
            raise
        except Exception as exc:
            self._raise_mapped(exc, "get", name)
        _report_finished(progress_callback, name)

    def delete(self, name: str) -> None:
        """Delete *name*; an absent blob is not an error."""
        self._ensure_writable("delete")
        logger.debug("deleting %s", self._uri(name))
        api_exceptions = _import_api_exceptions()
        try:
            self._blob(name).delete()
        except api_exceptions.NotFound:
            logger.debug("%s already absent", self._uri(name))
        except GcsBlobError:
            raise
        except Exception as exc:
            self._raise_mapped(exc, "delete", name)

    def exists(self, name: str) -> bool:
        """Return whether *name* exists in the bucket."""
        logger.debug("checking %s", self._uri(name))
        try:
            return bool(self._blob(name).exists())
        except GcsBlobError:
            raise
        except Exception as exc:
            self._raise_mapped(exc, "exists", name)

    def sign(self, name: str, action: str, expiry: timedelta) -> str:
        """Return a V4 signed URL for *action* on *name*.

        When an encryption key is configured its headers are bound into
        the signature; users of the URL must send them.

        Raises
        ------
        SigningError
            When the credentials cannot sign.
        """
        if self._config.read_only:
            raise SigningError(
                "cannot sign URLs with anonymous credentials",
                hint=_SIGNING_HINT,
            )
        headers = encryption_headers(self._config.encryption_key)
        logger.debug("signing %s %s for %s", action, self._uri(name), expiry)
        try:
            url = self._blob(name).generate_signed_url(
                version="v4",
                expiration=expiry,
                method=action,
                headers=headers or None,
            )
        except GcsBlobError:
            raise
        except AttributeError as exc:
            # Raised by the SDK when the credentials carry no private key.
            raise SigningError(
                f"credentials cannot sign URLs: {exc}",
                hint=_SIGNING_HINT,
            ) from exc
        except Exception as exc:
            self._raise_mapped(exc, "sign", name)
        return str(url)

    # ------------------------------------------------------------------
    # Exception mapping
    # ------------------------------------------------------------------

    def _raise_mapped(self, exc: Exception, operation: str, name: str) -> NoReturn:
        """Translate an SDK exception into a domain exception."""
        api_exceptions = _import_api_exceptions()
        uri = self._uri(name)
        if isinstance(exc, api_exceptions.NotFound):
            raise BlobNotFoundError(
                f"{uri} not found",
                hint="Check the bucket name and blob id.",
            ) from exc
        if isinstance(exc, (api_exceptions.Forbidden, api_exceptions.Unauthorized)):
            raise PermissionDeniedError(
                f"access denied performing {operation} on {uri}: {exc}",
                hint="Check that the credentials have access to the bucket.",
            ) from exc
        raise StorageOperationError(
            f"performing operation {operation}: {exc}",
        ) from exc
