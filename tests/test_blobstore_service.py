"""Tests for BlobstoreService (core/blobstore_service.py).

The :class:`BlobstoreProvider` dependency is **mocked** — no SDK, no
network.  These tests verify:

* Blob id validation
* Sign action normalisation and validation
* Expiry parsing and range checks
* Delegation arguments for every verb
* Exception wrapping (unexpected provider errors → StorageOperationError)
"""

from __future__ import annotations

import io
from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from gcsblob.core.blobstore_service import BlobstoreService
from gcsblob.exceptions import (
    BlobNotFoundError,
    InvalidBlobIdError,
    InvalidDurationError,
    InvalidSignActionError,
    StorageOperationError,
)


def _service() -> tuple[BlobstoreService, MagicMock]:
    provider = MagicMock()
    return BlobstoreService(provider), provider


# ---------------------------------------------------------------------------
# Blob id validation
# ---------------------------------------------------------------------------

class TestBlobIdValidation:
    def test_empty_id_rejected(self) -> None:
        svc, provider = _service()
        with pytest.raises(InvalidBlobIdError, match="empty"):
            svc.exists("")
        provider.exists.assert_not_called()

    def test_overlong_id_rejected(self) -> None:
        svc, _ = _service()
        with pytest.raises(InvalidBlobIdError, match="1024 bytes"):
            svc.delete("a" * 1025)

    def test_limit_counts_utf8_bytes(self) -> None:
        with pytest.raises(InvalidBlobIdError):
            BlobstoreService.validate_blob_id("é" * 513)

    def test_id_at_limit_accepted(self) -> None:
        BlobstoreService.validate_blob_id("a" * 1024)


# ---------------------------------------------------------------------------
# Sign validation
# ---------------------------------------------------------------------------

class TestNormalizeAction:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("GET", "GET"), ("get", "GET"), ("Put", "PUT"), ("delete", "DELETE")],
    )
    def test_valid_actions(self, raw: str, expected: str) -> None:
        assert BlobstoreService.normalize_action(raw) == expected

    @pytest.mark.parametrize("raw", ["POST", "HEAD", "OPTIONS", "GETS", ""])
    def test_invalid_actions(self, raw: str) -> None:
        with pytest.raises(InvalidSignActionError):
            BlobstoreService.normalize_action(raw)

    def test_message_names_the_action(self) -> None:
        with pytest.raises(
            InvalidSignActionError,
            match="invalid signing action: POST must be GET, PUT, or DELETE",
        ):
            BlobstoreService.normalize_action("post")


class TestParseExpiry:
    def test_hours(self) -> None:
        assert BlobstoreService.parse_expiry("6h") == timedelta(hours=6)

    def test_seven_days_accepted(self) -> None:
        assert BlobstoreService.parse_expiry("168h") == timedelta(days=7)

    def test_over_seven_days_rejected(self) -> None:
        with pytest.raises(InvalidDurationError, match="at most 7 days"):
            BlobstoreService.parse_expiry("168h1s")

    @pytest.mark.parametrize("raw", ["0", "0s", "-1h"])
    def test_non_positive_rejected(self, raw: str) -> None:
        with pytest.raises(InvalidDurationError, match="positive"):
            BlobstoreService.parse_expiry(raw)

    def test_malformed_rejected(self) -> None:
        with pytest.raises(InvalidDurationError):
            BlobstoreService.parse_expiry("six hours")


# ---------------------------------------------------------------------------
# Delegation
# ---------------------------------------------------------------------------

class TestDelegation:
    def test_put_plain(self) -> None:
        svc, provider = _service()
        stream = io.BytesIO(b"data")
        svc.put(stream, "dst", size=4)
        provider.put.assert_called_once_with(
            stream,
            "dst",
            content_encoding=None,
            size=4,
            progress_callback=None,
        )

    def test_put_compressed_sets_gzip_encoding(self) -> None:
        svc, provider = _service()
        stream = io.BytesIO(b"")
        callback = MagicMock()
        svc.put(stream, "dst", compressed=True, progress_callback=callback)
        provider.put.assert_called_once_with(
            stream,
            "dst",
            content_encoding="gzip",
            size=None,
            progress_callback=callback,
        )

    def test_get(self) -> None:
        svc, provider = _service()
        sink = io.BytesIO()
        svc.get("src", sink)
        provider.get.assert_called_once_with("src", sink, progress_callback=None)

    def test_delete(self) -> None:
        svc, provider = _service()
        svc.delete("blob")
        provider.delete.assert_called_once_with("blob")

    @pytest.mark.parametrize("present", [True, False])
    def test_exists(self, present: bool) -> None:
        svc, provider = _service()
        provider.exists.return_value = present
        assert svc.exists("blob") is present

    def test_sign(self) -> None:
        svc, provider = _service()
        provider.sign.return_value = "https://signed.example/blob"
        url = svc.sign("blob", "get", "1h30m")
        assert url == "https://signed.example/blob"
        provider.sign.assert_called_once_with("blob", "GET", timedelta(minutes=90))

    def test_sign_validates_before_calling_provider(self) -> None:
        svc, provider = _service()
        with pytest.raises(InvalidSignActionError):
            svc.sign("blob", "POST", "1h")
        with pytest.raises(InvalidDurationError):
            svc.sign("blob", "GET", "8d")
        provider.sign.assert_not_called()


# ---------------------------------------------------------------------------
# Exception mapping
# ---------------------------------------------------------------------------

class TestExceptions:
    def test_domain_error_propagates_unchanged(self) -> None:
        svc, provider = _service()
        original = BlobNotFoundError("gs://bucket/blob not found")
        provider.get.side_effect = original
        with pytest.raises(BlobNotFoundError) as exc_info:
            svc.get("blob", io.BytesIO())
        assert exc_info.value is original

    def test_unexpected_error_wrapped(self) -> None:
        svc, provider = _service()
        provider.delete.side_effect = RuntimeError("kaboom")
        with pytest.raises(StorageOperationError, match="performing operation delete: kaboom"):
            svc.delete("blob")

    def test_unexpected_error_chained(self) -> None:
        svc, provider = _service()
        original = OSError("socket closed")
        provider.put.side_effect = original
        with pytest.raises(StorageOperationError) as exc_info:
            svc.put(io.BytesIO(b"x"), "dst")
        assert exc_info.value.__cause__ is original
