"""Unit tests for hashing helpers."""

import base64
import hashlib
from datetime import timezone

from paywall_access.core import hashing


def test_sha256_b64_matches_hashlib():
    expected = base64.b64encode(hashlib.sha256(b"hello world").digest()).decode("ascii")
    assert hashing.sha256_b64("hello world") == expected
    assert hashing.sha256_b64(b"hello world") == expected


def test_sha256_bytes_utf8():
    assert hashing.sha256_bytes("é") == hashlib.sha256("é".encode("utf-8")).digest()


def test_b64_roundtrip():
    assert hashing.b64decode(hashing.b64encode(b"\x00\xff")) == b"\x00\xff"


def test_utc_timestamp_format():
    ts = hashing.utc_timestamp()
    assert ts.endswith("Z")
    # YYYY-MM-DDTHH:MM:SS.mmmZ
    assert len(ts) == 24
    assert ts[10] == "T"


def test_parse_timestamp_roundtrip():
    ts = hashing.utc_timestamp()
    parsed = hashing.parse_timestamp(ts)
    assert parsed.tzinfo is not None
    assert parsed.utcoffset() == timezone.utc.utcoffset(None)


def test_parse_timestamp_naive_assumed_utc():
    parsed = hashing.parse_timestamp("2024-01-01T12:00:00")
    assert parsed.tzinfo == timezone.utc
