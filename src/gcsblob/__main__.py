"""Allow ``python -m gcsblob`` invocation.

Delegates to the CLI error-boundary entry point so that
``python -m gcsblob`` behaves identically to the ``gcsblob`` console
script.
"""

from __future__ import annotations

from gcsblob.cli.app import cli

if __name__ == "__main__":
    cli()
