"""Security helpers: content encryption and payment-bound key wrapping.

This package provides:
- AES-256-GCM content encryption with random per-call nonces
- Content-key wrapping bound to (user, content, payment proof)
- Paid-access wrapping bound to (content, price)
- Payment proof parsing and access verification

Proof authenticity is out of scope: proofs must come from a payment system
that makes them unforgeable.
"""

from .crypto import generate_encryption_key, encrypt_content, decrypt_content, decrypt_content_bytes
from .kdf import derive_wrapping_key
from .access import (
    generate_access_token,
    encrypt_key_for_user,
    decrypt_key_for_user,
    encrypt_key_for_paid_access,
    decrypt_key_for_paid_access,
)
from .proof import (
    generate_payment_proof,
    parse_payment_proof,
    verify_user_access,
    require_verified_proof,
)

__all__ = [
    "generate_encryption_key",
    "encrypt_content",
    "decrypt_content",
    "decrypt_content_bytes",
    "derive_wrapping_key",
    "generate_access_token",
    "encrypt_key_for_user",
    "decrypt_key_for_user",
    "encrypt_key_for_paid_access",
    "decrypt_key_for_paid_access",
    "generate_payment_proof",
    "parse_payment_proof",
    "verify_user_access",
    "require_verified_proof",
]
