"""gcsblob — command-line client for Google Cloud Storage blobs.

Maps the ``put``, ``get``, ``delete``, ``exists`` and ``sign`` verbs onto
the google-cloud-storage Python SDK with a strict layered architecture.
"""

from gcsblob.version import __version__

__all__: list[str] = ["__version__"]
