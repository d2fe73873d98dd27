"""Domain models and constants for gcsblob.

Models are **frozen** dataclasses — immutable value objects with no
behaviour beyond data access.  They carry zero I/O and no dependency on
the storage SDK.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

CREDENTIALS_DEFAULT: str = ""
"""Application Default Credentials."""

CREDENTIALS_STATIC: str = "static"
"""Service account key supplied in the ``json_key`` config field."""

CREDENTIALS_NONE: str = "none"
"""Anonymous access.  The client is read-only."""

CREDENTIALS_SOURCES: tuple[str, ...] = (
    CREDENTIALS_DEFAULT,
    CREDENTIALS_STATIC,
    CREDENTIALS_NONE,
)

STORAGE_CLASSES: tuple[str, ...] = (
    "STANDARD",
    "NEARLINE",
    "COLDLINE",
    "ARCHIVE",
    "MULTI_REGIONAL",
    "REGIONAL",
    "DURABLE_REDUCED_AVAILABILITY",
)

SIGN_ACTIONS: tuple[str, ...] = ("GET", "PUT", "DELETE")

MAX_SIGN_EXPIRY: timedelta = timedelta(days=7)
"""Upper bound imposed by V4 signed URLs."""

MAX_BLOB_ID_BYTES: int = 1024

GZIP_CONTENT_ENCODING: str = "gzip"

ENCRYPTION_KEY_BYTES: int = 32


# ---------------------------------------------------------------------------
# Configuration record
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class BlobstoreConfig:
    """Settings passed once to the storage provider."""

    bucket_name: str
    """Name of the Google Cloud Storage bucket."""

    storage_class: str = ""
    """Storage class for new objects.  Empty means bucket default."""

    credentials_source: str = CREDENTIALS_DEFAULT
    """One of :data:`CREDENTIALS_SOURCES`."""

    json_key: str = ""
    """Service account JSON, used with :data:`CREDENTIALS_STATIC`."""

    encryption_key: bytes | None = None
    """Customer-supplied AES-256 key, or ``None`` for Google-managed keys."""

    @property
    def read_only(self) -> bool:
        return self.credentials_source == CREDENTIALS_NONE
