"""AES-256-GCM content cipher with a compact, transport-friendly payload.

Payload layout (base64 of):
- 12 bytes: random nonce, fresh per call
- N bytes: AES-GCM ciphertext with the 16-byte tag appended

Keys travel as base64 strings of 32 random bytes. Tag failures surface as
``cryptography.exceptions.InvalidTag``; a wrong key and a corrupted payload
look the same to the caller.
"""
import logging
import os
from typing import Union

from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from paywall_access.core.hashing import b64encode, b64decode

logger = logging.getLogger(__name__)

KEY_SIZE = 32
NONCE_SIZE = 12


def generate_encryption_key() -> str:
    return b64encode(os.urandom(KEY_SIZE))


def seal(key: bytes, data: bytes) -> bytes:
    """Encrypt ``data`` under ``key`` and return ``nonce || ciphertext``."""
    nonce = os.urandom(NONCE_SIZE)
    ct = AESGCM(key).encrypt(nonce, data, None)
    return nonce + ct


def open_sealed(key: bytes, blob: bytes) -> bytes:
    """Inverse of :func:`seal`."""
    if len(blob) < NONCE_SIZE:
        raise ValueError("Ciphertext too short to contain nonce")
    nonce, ct = blob[:NONCE_SIZE], blob[NONCE_SIZE:]
    return AESGCM(key).decrypt(nonce, ct, None)


def encrypt_content(plaintext: Union[str, bytes], key: str) -> str:
    if isinstance(plaintext, str):
        plaintext = plaintext.encode("utf-8")
    payload = b64encode(seal(b64decode(key), plaintext))
    logger.debug(f"Encrypted {len(plaintext)} bytes of content")
    return payload


def decrypt_content_bytes(payload: str, key: str) -> bytes:
    return open_sealed(b64decode(key), b64decode(payload))


def decrypt_content(payload: str, key: str) -> str:
    return decrypt_content_bytes(payload, key).decode("utf-8")
