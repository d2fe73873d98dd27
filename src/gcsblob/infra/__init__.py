"""Infrastructure layer — external system integration.

This layer wraps all interaction with google-cloud-storage and the
operating system pipe used for streaming compression.  Every raw
third-party exception is caught here and re-raised as a
:class:`~gcsblob.exceptions.GcsBlobError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
"""

from gcsblob.infra.gcs_provider import GcsBlobstoreProvider, encryption_headers
from gcsblob.infra.gzip_pipe import GzipPipe

__all__: list[str] = [
    "GcsBlobstoreProvider",
    "GzipPipe",
    "encryption_headers",
]
