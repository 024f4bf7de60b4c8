import hashlib
from typing import Optional

from argon2.low_level import Type, hash_secret_raw
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from paywall_access.core.config import AccessConfig, DEFAULT_CONFIG

WRAP_INFO = b"paywall-access-wrap-v1"
WRAP_KEY_LEN = 32


def encode_context(*parts: str) -> bytes:
    """Length-prefix each UTF-8 part so no two field splits encode alike."""
    out = bytearray()
    for part in parts:
        raw = part.encode("utf-8")
        out += len(raw).to_bytes(4, "big")
        out += raw
    return bytes(out)


def context_salt(content_id: str, length: int = 32) -> bytes:
    # Deterministic per-content salt; unwrap has nothing else to recover it from.
    return hashlib.sha256(b"paywall-access-salt:" + content_id.encode("utf-8")).digest()[:length]


def _derive_sha256(user_address: str, payment_proof: str, content_id: str, config: AccessConfig) -> bytes:
    data = f"{user_address}:{payment_proof}:{content_id}".encode("utf-8")
    return hashlib.sha256(data).digest()


def _derive_hkdf(user_address: str, payment_proof: str, content_id: str, config: AccessConfig) -> bytes:
    hkdf = HKDF(
        algorithm=hashes.SHA256(),
        length=WRAP_KEY_LEN,
        salt=context_salt(content_id),
        info=WRAP_INFO,
    )
    return hkdf.derive(encode_context(user_address, payment_proof, content_id))


def _derive_argon2id(user_address: str, payment_proof: str, content_id: str, config: AccessConfig) -> bytes:
    return hash_secret_raw(
        secret=encode_context(user_address, payment_proof, content_id),
        salt=context_salt(content_id, 16),
        time_cost=config.argon2_time_cost,
        memory_cost=config.argon2_memory_cost,
        parallelism=config.argon2_parallelism,
        hash_len=WRAP_KEY_LEN,
        type=Type.ID,
    )


_DERIVERS = {
    "sha256": _derive_sha256,
    "hkdf": _derive_hkdf,
    "argon2id": _derive_argon2id,
}


def derive_wrapping_key(
    user_address: str,
    payment_proof: str,
    content_id: str,
    algorithm: Optional[str] = None,
    config: Optional[AccessConfig] = None,
) -> bytes:
    """
    Derive the 256-bit key that wraps a content key for one access context.

    ``sha256`` is the single hash of ``user:proof:content`` older records were
    written with. ``hkdf`` and ``argon2id`` run over a length-prefixed encoding
    with a content-derived salt.
    """
    config = config or DEFAULT_CONFIG
    algorithm = algorithm or config.kdf
    try:
        derive = _DERIVERS[algorithm]
    except KeyError:
        raise ValueError(f"Unsupported key derivation: {algorithm}") from None
    return derive(user_address, payment_proof, content_id, config)
