"""Single source of truth for the gcsblob version string."""

__version__: str = "1.0.0"
