"""Content-key wrapping bound to a user, a content id and a payment proof.

The wrapping key is derived from ``(user_address, payment_proof, content_id)``,
so a wrapped key is useless to anyone who cannot present the same triple. The
record also carries a SHA-256 signature over ``user:content:timestamp:proof``
that is checked before any decryption is attempted.

Paid-access records swap the user for the sentinel ``"content"`` and the proof
for ``"content:{content_id}:{price}"``: anyone who knows the posted price of a
content id can unwrap them.
"""
from __future__ import annotations

import hmac
import logging
from typing import Optional

from paywall_access.core.config import AccessConfig, DEFAULT_CONFIG
from paywall_access.core.exceptions import AccessError
from paywall_access.core.hashing import b64encode, b64decode, sha256_b64, utc_timestamp
from paywall_access.core.models import (
    EncryptedKeyMetadata,
    PAID_ACCESS_SENTINEL,
    PriceBound,
    paid_access_proof,
)

from .crypto import seal, open_sealed
from .kdf import derive_wrapping_key
from .proof import ProofLike, proof_text

logger = logging.getLogger(__name__)


def generate_access_token(user_address: str, content_id: str, timestamp: str) -> str:
    return sha256_b64(f"{user_address}:{content_id}:{timestamp}")


def compute_signature(user_address: str, content_id: str, timestamp: str, payment_proof: str) -> str:
    return sha256_b64(f"{user_address}:{content_id}:{timestamp}:{payment_proof}")


def _signature_matches(expected: str, actual: str) -> bool:
    return hmac.compare_digest(expected.encode("utf-8"), actual.encode("utf-8"))


def encrypt_key_for_user(
    content_key: str,
    user_address: str,
    content_id: str,
    payment_proof: ProofLike,
    config: Optional[AccessConfig] = None,
) -> EncryptedKeyMetadata:
    """Wrap ``content_key`` so only this user with this proof can recover it."""
    config = config or DEFAULT_CONFIG
    payment_proof = proof_text(payment_proof)
    timestamp = utc_timestamp()

    wrapping_key = derive_wrapping_key(user_address, payment_proof, content_id, config.kdf, config)
    encrypted_key = b64encode(seal(wrapping_key, content_key.encode("utf-8")))

    logger.debug(f"Wrapped content key for content {content_id!r} (kdf={config.kdf})")
    return EncryptedKeyMetadata(
        encrypted_key=encrypted_key,
        user_address=user_address,
        content_id=content_id,
        payment_proof=payment_proof,
        timestamp=timestamp,
        access_token=generate_access_token(user_address, content_id, timestamp),
        signature=compute_signature(user_address, content_id, timestamp, payment_proof),
        kdf=config.kdf,
    )


def _unwrap(metadata: EncryptedKeyMetadata, user_address: str, payment_proof: str, content_id: str,
            config: Optional[AccessConfig]) -> str:
    wrapping_key = derive_wrapping_key(user_address, payment_proof, content_id, metadata.kdf, config)
    return open_sealed(wrapping_key, b64decode(metadata.encrypted_key)).decode("utf-8")


def decrypt_key_for_user(
    metadata: EncryptedKeyMetadata,
    user_address: str,
    content_id: str,
    payment_proof: ProofLike,
    config: Optional[AccessConfig] = None,
) -> str:
    """
    Recover a content key wrapped by :func:`encrypt_key_for_user`.

    The context checks run before the signature check so callers get the most
    specific message. AES-GCM tag failures propagate as ``InvalidTag``.
    """
    payment_proof = proof_text(payment_proof)

    if metadata.user_address != user_address:
        logger.warning(f"Key unwrap denied for content {content_id!r}: user address mismatch")
        raise AccessError("User address mismatch")

    if metadata.content_id != content_id:
        logger.warning(f"Key unwrap denied for content {content_id!r}: content ID mismatch")
        raise AccessError("Content ID mismatch")

    if metadata.payment_proof != payment_proof:
        logger.warning(f"Key unwrap denied for content {content_id!r}: payment proof mismatch")
        raise AccessError("Payment proof mismatch")

    expected = compute_signature(user_address, content_id, metadata.timestamp, payment_proof)
    if not _signature_matches(expected, metadata.signature):
        logger.warning(f"Key unwrap denied for content {content_id!r}: bad signature")
        raise AccessError("Signature verification failed")

    return _unwrap(metadata, user_address, payment_proof, content_id, config)


def encrypt_key_for_paid_access(
    content_key: str,
    content_id: str,
    price: str,
    config: Optional[AccessConfig] = None,
) -> EncryptedKeyMetadata:
    return encrypt_key_for_user(
        content_key,
        PAID_ACCESS_SENTINEL,
        content_id,
        paid_access_proof(content_id, price),
        config=config,
    )


def decrypt_key_for_paid_access(
    metadata: EncryptedKeyMetadata,
    user_address: str,
    content_id: str,
    price: str,
    config: Optional[AccessConfig] = None,
) -> str:
    """
    Recover a content key wrapped by :func:`encrypt_key_for_paid_access`.

    ``user_address`` plays no part in the derivation; the price does, through
    the signature and the wrapping key.
    """
    if not isinstance(metadata.binding, PriceBound):
        raise AccessError("Invalid encryption metadata")

    if metadata.content_id != content_id:
        raise AccessError("Content ID mismatch")

    payment_proof = paid_access_proof(content_id, price)
    expected = compute_signature(PAID_ACCESS_SENTINEL, content_id, metadata.timestamp, payment_proof)
    if not _signature_matches(expected, metadata.signature):
        logger.warning(f"Paid access denied for content {content_id!r}: price does not match")
        raise AccessError("Signature verification failed")

    logger.debug(f"Paid access unwrap for content {content_id!r} requested by {user_address!r}")
    return _unwrap(metadata, PAID_ACCESS_SENTINEL, payment_proof, content_id, config)
