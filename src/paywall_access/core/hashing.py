""" Utility for hashing and encoding operations. """

import base64
import hashlib
from datetime import datetime, timezone
from typing import Union


def sha256_bytes(data: Union[str, bytes]) -> bytes:

    # Raw SHA-256 digest; strings are hashed as UTF-8.

    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.sha256(data).digest()


def sha256_b64(data: Union[str, bytes]) -> str:
    """Base64 of the SHA-256 digest of ``data``."""
    return b64encode(sha256_bytes(data))


def b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def b64decode(data: str) -> bytes:
    return base64.b64decode(data)


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with milliseconds and a ``Z`` suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    # fromisoformat only accepts "Z" from 3.11 on
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
