"""Core / service layer — validation and orchestration.

Rules
-----
* No ``print()`` calls.
* No filesystem or network I/O.
* No imports from ``cli`` or ``infra``.
"""

from gcsblob.core.blobstore_service import BlobstoreService
from gcsblob.core.config import build_config, parse_config_json
from gcsblob.core.duration import parse_duration
from gcsblob.core.models import BlobstoreConfig
from gcsblob.core.protocols import BlobstoreProvider

__all__: list[str] = [
    "BlobstoreConfig",
    "BlobstoreProvider",
    "BlobstoreService",
    "build_config",
    "parse_config_json",
    "parse_duration",
]
