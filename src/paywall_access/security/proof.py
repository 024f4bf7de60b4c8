"""Payment proof parsing and access verification.

A proof is ``base64("{user}:{content}:{amount}:{timestamp}")``. Nothing here
checks where a proof came from: a real deployment must get proofs from a
payment system that signs them. These helpers only check that a proof is
well formed and names the requested user and content.
"""
from __future__ import annotations

import base64
import binascii
import logging
import secrets
import time
from typing import Optional, Union

from paywall_access.core.exceptions import AccessError
from paywall_access.core.hashing import utc_timestamp
from paywall_access.core.models import ParsedProof, PaymentVerification, VerifiedProof

logger = logging.getLogger(__name__)

ProofLike = Union[str, VerifiedProof]


def proof_text(proof: ProofLike) -> str:
    """Return the raw proof string for a bare string or a VerifiedProof."""
    if isinstance(proof, VerifiedProof):
        return proof.proof
    return proof


def generate_payment_proof(user_address: str, content_id: str, amount: str) -> str:
    """Build a stub proof. Real proofs come from the payment system."""
    data = f"{user_address}:{content_id}:{amount}:{utc_timestamp()}"
    return base64.b64encode(data.encode("utf-8")).decode("ascii")


def parse_payment_proof(proof: Optional[str]) -> Optional[ParsedProof]:
    """
    Decode a proof into its fields, or return None if it is malformed.

    Missing ``=`` padding is restored before decoding; characters outside the
    base64 alphabet still fail.
    """
    if not proof:
        return None
    try:
        padded = proof + "=" * (-len(proof) % 4)
        decoded = base64.b64decode(padded, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None

    parts = decoded.split(":")
    if len(parts) < 4:
        return None
    user_address, content_id, amount = parts[:3]
    # ISO timestamps carry their own colons
    timestamp = ":".join(parts[3:])
    return ParsedProof(
        proof=proof,
        user_address=user_address,
        content_id=content_id,
        amount=amount,
        timestamp=timestamp,
    )


def _denied() -> PaymentVerification:
    return PaymentVerification(is_valid=False, amount="0", timestamp=utc_timestamp())


def _transaction_id() -> str:
    return f"tx_{int(time.time() * 1000)}_{secrets.token_hex(4)}"


def verify_user_access(user_address: str, content_id: str, proof: Optional[str] = None) -> PaymentVerification:
    """
    Check that ``proof`` is well formed and was issued for this user and content.

    Never raises on bad input; every failure returns ``is_valid=False`` with
    amount ``"0"``.
    """
    parsed = parse_payment_proof(proof_text(proof) if proof is not None else None)
    if parsed is None:
        logger.debug("Access denied: missing or malformed payment proof")
        return _denied()

    if parsed.user_address != user_address or parsed.content_id != content_id:
        logger.warning(f"Access denied: proof does not match content {content_id!r}")
        return _denied()

    return PaymentVerification(
        is_valid=True,
        amount=parsed.amount,
        timestamp=parsed.timestamp,
        transaction_id=_transaction_id(),
    )


def require_verified_proof(user_address: str, content_id: str, proof: ProofLike) -> VerifiedProof:
    """
    Like :func:`verify_user_access` but raises and returns the checked proof.

    A ``VerifiedProof`` argument is not trusted: its raw proof is parsed again
    and the result is built from that parse alone.
    """
    parsed = parse_payment_proof(proof_text(proof))
    if parsed is None or parsed.user_address != user_address or parsed.content_id != content_id:
        logger.warning(f"Payment proof rejected for content {content_id!r}")
        raise AccessError("Payment proof invalid")
    return VerifiedProof(
        proof=parsed.proof,
        user_address=parsed.user_address,
        content_id=parsed.content_id,
        amount=parsed.amount,
        timestamp=parsed.timestamp,
    )
