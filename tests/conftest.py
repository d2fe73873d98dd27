"""Shared pytest fixtures and configuration for the gcsblob test suite.

Guidelines
----------
* No network access and no real credentials in any test.
* google-cloud-storage is mocked at the provider boundary (injected client).
* CLI tests drive :func:`gcsblob.cli.app.main` with the service factory
  replaced, so no provider is ever constructed.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any
from unittest.mock import MagicMock

import pytest

from gcsblob.core.blobstore_service import BlobstoreService


@pytest.fixture
def fake_service(monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    """Replace ``_build_service`` with a factory returning a MagicMock.

    The configs the CLI built are recorded on ``service.built_configs``.
    """
    from gcsblob.cli import app as app_module

    service = MagicMock()
    service.built_configs = []

    def _factory(config: Any) -> MagicMock:
        service.built_configs.append(config)
        return service

    monkeypatch.setattr(app_module, "_build_service", _factory)
    return service


@pytest.fixture
def fake_provider(monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    """Wire a real :class:`BlobstoreService` around a MagicMock provider."""
    from gcsblob.cli import app as app_module

    provider = MagicMock()
    monkeypatch.setattr(
        app_module, "_build_service", lambda config: BlobstoreService(provider),
    )
    return provider


@pytest.fixture
def restore_package_logger() -> Iterator[logging.Logger]:
    """Undo handler/level changes made by ``configure_logging``."""
    package_logger = logging.getLogger("gcsblob")
    handlers = list(package_logger.handlers)
    level = package_logger.level
    propagate = package_logger.propagate
    yield package_logger
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    for handler in handlers:
        package_logger.addHandler(handler)
    package_logger.setLevel(level)
    package_logger.propagate = propagate
