"""Configuration parsing and validation.

The optional ``-c`` config file is a JSON object::

    {
        "bucket_name":        "name of Google Cloud Storage bucket (required)",
        "credentials_source": "'' for Application Default Credentials,
                               'static' for the service account in json_key,
                               'none' for explicitly no credentials",
        "json_key":           "JSON service account key (required for 'static')",
        "storage_class":      "storage class for objects (optional,
                               defaults to bucket settings)",
        "encryption_key":     "base64 encoded 32 byte customer-supplied
                               encryption key (optional)"
    }

Command-line flags override values from the file.  This module performs
no file I/O — the CLI layer reads the file and hands over its text.
"""

from __future__ import annotations

import base64
import binascii
import json
from collections.abc import Mapping
from typing import Any

from gcsblob.core.models import (
    CREDENTIALS_SOURCES,
    CREDENTIALS_STATIC,
    ENCRYPTION_KEY_BYTES,
    STORAGE_CLASSES,
    BlobstoreConfig,
)
from gcsblob.exceptions import ConfigError

_KNOWN_KEYS: tuple[str, ...] = (
    "bucket_name",
    "credentials_source",
    "json_key",
    "storage_class",
    "encryption_key",
)


def parse_config_json(text: str) -> dict[str, Any]:
    """Decode a JSON config document into a plain dict of known keys.

    Unknown keys are dropped.

    Raises
    ------
    ConfigError
        When *text* is not valid JSON or not a JSON object.
    """
    try:
        raw: object = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"invalid JSON in config: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError("config must be a JSON object")

    values: dict[str, Any] = {}
    for key in _KNOWN_KEYS:
        if key not in raw or raw[key] is None:
            continue
        value = raw[key]
        if not isinstance(value, str):
            raise ConfigError(f"config field {key!r} must be a string")
        values[key] = value
    return values


# ---------------------------------------------------------------------------
# Field validators
# ---------------------------------------------------------------------------

def _normalize_storage_class(value: str) -> str:
    if not value:
        return ""
    normalized = value.strip().upper()
    if normalized not in STORAGE_CLASSES:
        raise ConfigError(
            f"invalid storage class: {value}",
            hint="Use one of: " + ", ".join(STORAGE_CLASSES),
        )
    return normalized


def _validate_credentials(source: str, json_key: str) -> None:
    if source not in CREDENTIALS_SOURCES:
        raise ConfigError(
            f"invalid credentials_source: {source!r}",
            hint="Use '' (application default), 'static' or 'none'.",
        )
    if source != CREDENTIALS_STATIC:
        return
    if not json_key:
        raise ConfigError(
            "credentials_source 'static' requires json_key",
        )
    try:
        key_info: object = json.loads(json_key)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"json_key is not valid JSON: {exc}") from exc
    if not isinstance(key_info, dict):
        raise ConfigError("json_key must be a JSON object")


def _decode_encryption_key(value: str) -> bytes | None:
    if not value:
        return None
    try:
        key = base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ConfigError("encryption_key is not valid base64") from exc
    if len(key) != ENCRYPTION_KEY_BYTES:
        raise ConfigError(
            f"encryption_key must decode to {ENCRYPTION_KEY_BYTES} bytes, "
            f"got {len(key)}",
        )
    return key


# ---------------------------------------------------------------------------
# Public builder
# ---------------------------------------------------------------------------

def build_config(
    values: Mapping[str, Any] | None = None,
    *,
    bucket: str | None = None,
    storage_class: str | None = None,
) -> BlobstoreConfig:
    """Merge config-file *values* with flag overrides and validate.

    A non-empty *bucket* or *storage_class* flag wins over the file.

    Raises
    ------
    ConfigError
        When the bucket is missing or any field is invalid.
    """
    merged: dict[str, Any] = dict(values or {})
    if bucket:
        merged["bucket_name"] = bucket
    if storage_class:
        merged["storage_class"] = storage_class

    bucket_name = str(merged.get("bucket_name", "")).strip()
    if not bucket_name:
        raise ConfigError(
            "no bucket name provided",
            hint="See -help for usage",
        )

    credentials_source = str(merged.get("credentials_source", ""))
    json_key = str(merged.get("json_key", ""))
    _validate_credentials(credentials_source, json_key)

    return BlobstoreConfig(
        bucket_name=bucket_name,
        storage_class=_normalize_storage_class(str(merged.get("storage_class", ""))),
        credentials_source=credentials_source,
        json_key=json_key,
        encryption_key=_decode_encryption_key(str(merged.get("encryption_key", ""))),
    )
