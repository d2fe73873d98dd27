"""Custom exception hierarchy for gcsblob.

All exceptions that cross layer boundaries must inherit from
:class:`GcsBlobError`.  Raw google-cloud-storage exceptions must NEVER
propagate beyond the infrastructure layer — they are caught there and
re-raised as a typed subclass defined here.

Hierarchy
---------
GcsBlobError
├── UsageError
│   ├── InvalidSignActionError
│   └── InvalidDurationError
├── InvalidBlobIdError
├── ConfigError
├── CredentialsError
├── EnvironmentError
├── LocalFileError
├── BlobNotFoundError
├── PermissionDeniedError
├── ReadOnlyClientError
├── CompressionError
├── SigningError
└── StorageOperationError
"""

from __future__ import annotations


class GcsBlobError(Exception):
    """Base exception for all gcsblob errors.

    Every user-visible error condition maps to a subclass of this
    exception so that the CLI error boundary can render a clean message
    and exit with :data:`~gcsblob.cli.exit_codes.GENERAL_ERROR`.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Command line ----------------------------------------------------------

class UsageError(GcsBlobError):
    """Raised for an unknown verb or a wrong number of verb arguments."""


class InvalidSignActionError(UsageError):
    """Raised when ``sign`` is given an action other than GET, PUT or DELETE."""


class InvalidDurationError(UsageError):
    """Raised when a signing expiry cannot be parsed or is out of range."""


class InvalidBlobIdError(GcsBlobError):
    """Raised when a blob id is empty or too long for an object name."""


# --- Configuration / environment -------------------------------------------

class ConfigError(GcsBlobError):
    """Raised when the configuration file or flags are invalid."""


class CredentialsError(GcsBlobError):
    """Raised when storage credentials cannot be resolved."""


class EnvironmentError(GcsBlobError):
    """Raised when a required runtime dependency is not available."""


class LocalFileError(GcsBlobError):
    """Raised when a local source or destination file cannot be opened."""


# --- Remote operations -----------------------------------------------------

class BlobNotFoundError(GcsBlobError):
    """Raised when the requested blob (or its bucket) does not exist."""


class PermissionDeniedError(GcsBlobError):
    """Raised when the credentials lack access to the bucket or blob."""


class ReadOnlyClientError(GcsBlobError):
    """Raised when a write is attempted with anonymous credentials."""


class CompressionError(GcsBlobError):
    """Raised when gzip-compressing an upload fails part way through."""


class SigningError(GcsBlobError):
    """Raised when a signed URL cannot be generated."""


class StorageOperationError(GcsBlobError):
    """Raised for any other failure reported by the storage backend."""
