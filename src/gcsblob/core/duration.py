"""Parsing of Go-style duration strings such as ``"6h"`` or ``"1h30m"``.

A duration is an optional sign followed by one or more decimal numbers,
each with a unit suffix.  Valid units are ``ns``, ``us`` (or ``µs``),
``ms``, ``s``, ``m`` and ``h``.  The bare string ``"0"`` is also
accepted.

Every function here is pure.  Precision below one microsecond is
truncated because :class:`~datetime.timedelta` cannot represent it.
"""

from __future__ import annotations

import re
from datetime import timedelta

from gcsblob.exceptions import InvalidDurationError

_NANOSECONDS_PER_UNIT: dict[str, int] = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,  # U+00B5 micro sign
    "μs": 1_000,  # U+03BC greek small letter mu
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 60 * 60 * 1_000_000_000,
}

# Signed 64-bit nanosecond range.
_MAX_NANOSECONDS: int = (1 << 63) - 1

_DURATION_RE =re.compile(r"[-+]?(?:(?:\d+\.?\d*|\.\d+)[^\d.]+)+")
_TERM_RE = re.compile(r"(\d*)\.?(\d*)([^\d.]+)")
_UNITLESS_RE = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)")


def _invalid(text: str, reason: str = "invalid duration") -> InvalidDurationError:
    return InvalidDurationError(
        f"{reason} {text!r}",
        hint='Use a duration such as "30m", "6h" or "1h30m".',
    )


def _term_nanoseconds(whole: str, fraction: str, unit: str, text: str) -> int:
    """Convert one ``<number><unit>`` term to integer nanoseconds."""
    scale = _NANOSECONDS_PER_UNIT.get(unit)
    if scale is None:
        raise _invalid(text, f"unknown unit {unit!r} in duration")
    total = int(whole or "0") * scale
    if fraction:
        total += int(fraction) * scale // 10 ** len(fraction)
    return total


def parse_duration_nanoseconds(text: str) -> int:
    """Parse *text* and return the signed duration in nanoseconds.

    Raises
    ------
    InvalidDurationError
        When *text* is empty, lacks a unit, uses an unknown unit, overflows
        a signed 64-bit nanosecond count or is otherwise malformed.
    """
    stripped = text.strip()
    if stripped in ("0", "+0", "-0"):
        return 0
    if not _DURATION_RE.fullmatch(stripped):
        if _UNITLESS_RE.fullmatch(stripped):
            raise _invalid(text, "missing unit in duration")
        raise _invalid(text)

    negative = stripped.startswith("-")
    body = stripped.lstrip("+-")
    total = sum(
        _term_nanoseconds(whole, fraction, unit, text)
        for whole, fraction, unit in _TERM_RE.findall(body)
    )
    if total > _MAX_NANOSECONDS + (1 if negative else 0):
        raise _invalid(text)
    return -total if negative else total


def parse_duration(text: str) -> timedelta:
    """Parse a Go-style duration string into a :class:`timedelta`.

    >>> parse_duration("1h30m")
    datetime.timedelta(seconds=5400)
    """
    nanoseconds = parse_duration_nanoseconds(text)
    microseconds = abs(nanoseconds) // 1_000
    return timedelta(microseconds=-microseconds if nanoseconds < 0 else microseconds)
