"""
Unit tests for the content cipher.
"""

import base64

import pytest
from cryptography.exceptions import InvalidTag

from paywall_access.security.crypto import (
    NONCE_SIZE,
    decrypt_content,
    decrypt_content_bytes,
    encrypt_content,
    generate_encryption_key,
    open_sealed,
    seal,
)


@pytest.fixture
def key():
    return generate_encryption_key()


# ==============================================================================
# Tests: Key Generation
# ==============================================================================

def test_generate_key_is_256_bit_base64():
    key = generate_encryption_key()
    assert len(base64.b64decode(key)) == 32


def test_generate_key_unique():
    assert generate_encryption_key() != generate_encryption_key()


# ==============================================================================
# Tests: Encrypt / Decrypt
# ==============================================================================

def test_encrypt_decrypt_roundtrip(key):
    msg = "This is a test content that needs to be encrypted"
    payload = encrypt_content(msg, key)
    assert payload != msg
    assert decrypt_content(payload, key) == msg


@pytest.mark.parametrize(
    "content",
    [
        "Simple text content",
        '{"test": "data", "number": 123}',
        "A" * 1000,
        "Content with special chars: !@#$%^&*()_+-=[]{}|;:,.<>?",
        "Unicode content: \U0001F680\U0001F31F\U0001F389 中文 日本語 한국어",
        "",
    ],
)
def test_roundtrip_varied_content(key, content):
    assert decrypt_content(encrypt_content(content, key), key) == content


def test_encrypt_accepts_bytes(key):
    data = bytes(range(256))
    assert decrypt_content_bytes(encrypt_content(data, key), key) == data


def test_same_input_gives_different_payloads(key):
    """Fresh nonce per call: same plaintext and key never repeat a payload."""
    p1 = encrypt_content("secret message", key)
    p2 = encrypt_content("secret message", key)
    assert p1 != p2
    assert decrypt_content(p1, key) == decrypt_content(p2, key) == "secret message"


def test_payload_layout(key):
    msg = b"hello world"
    raw = base64.b64decode(encrypt_content(msg, key))
    # nonce (12) + ciphertext (len(msg)) + tag (16)
    assert len(raw) == NONCE_SIZE + len(msg) + 16


def test_wrong_key_rejected(key):
    payload = encrypt_content("secret message", key)
    with pytest.raises(InvalidTag):
        decrypt_content(payload, generate_encryption_key())


def test_tampered_payload_rejected(key):
    raw = bytearray(base64.b64decode(encrypt_content("secret message", key)))
    raw[NONCE_SIZE + 2] ^= 0x01
    with pytest.raises(InvalidTag):
        decrypt_content(base64.b64encode(bytes(raw)).decode("ascii"), key)


def test_tampered_nonce_rejected(key):
    raw = bytearray(base64.b64decode(encrypt_content("secret message", key)))
    raw[0] ^= 0xFF
    with pytest.raises(InvalidTag):
        decrypt_content(base64.b64encode(bytes(raw)).decode("ascii"), key)


def test_open_sealed_too_short():
    with pytest.raises(ValueError, match="Ciphertext too short"):
        open_sealed(b"\x00" * 32, b"short")


def test_seal_roundtrip_raw_key():
    raw_key = b"\x01" * 32
    assert open_sealed(raw_key, seal(raw_key, b"data")) == b"data"
