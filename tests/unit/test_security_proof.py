"""
Unit tests for payment proof parsing and access verification.
"""

import base64

import pytest

from paywall_access.core.exceptions import AccessError
from paywall_access.core.models import ParsedProof, VerifiedProof
from paywall_access.security.proof import (
    generate_payment_proof,
    parse_payment_proof,
    proof_text,
    require_verified_proof,
    verify_user_access,
)

USER = "0xTestUser123456789"
CONTENT = "test-content-id-123"


def _encode(text):
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


# ==============================================================================
# Tests: Proof Generation
# ==============================================================================

def test_generate_proof_contains_payment_info():
    proof = generate_payment_proof(USER, CONTENT, "1.00")
    parts = base64.b64decode(proof).decode("utf-8").split(":")
    assert len(parts) >= 4
    assert parts[:3] == [USER, CONTENT, "1.00"]


def test_generate_proof_varies_with_inputs():
    p1 = generate_payment_proof(USER, CONTENT, "1.00")
    p2 = generate_payment_proof(USER, CONTENT, "2.00")
    p3 = generate_payment_proof("0xDifferentUser", CONTENT, "1.00")
    assert p1 != p2
    assert p1 != p3


# ==============================================================================
# Tests: Parsing
# ==============================================================================

def test_parse_recovers_full_timestamp():
    proof = _encode(f"{USER}:{CONTENT}:1.00:2024-01-01T12:00:00.000Z")
    parsed = parse_payment_proof(proof)
    assert parsed == ParsedProof(
        proof=proof,
        user_address=USER,
        content_id=CONTENT,
        amount="1.00",
        timestamp="2024-01-01T12:00:00.000Z",
    )


@pytest.mark.parametrize(
    "proof",
    [
        None,
        "",
        "invalid-proof",
        _encode("only:three:fields"),
        base64.b64encode(b"\xff\xfe:\x00:\x01:\x02").decode("ascii"),
    ],
)
def test_parse_malformed(proof):
    assert parse_payment_proof(proof) is None


def test_parse_accepts_stripped_padding():
    proof = _encode("0xUU:c1:1.00:2024-01-01T00:00:00.000Z")
    assert proof.endswith("=")
    parsed = parse_payment_proof(proof.rstrip("="))
    assert parsed is not None
    assert parsed.user_address == "0xUU"
    assert parsed.timestamp == "2024-01-01T00:00:00.000Z"


def test_parse_result_is_not_verified():
    parsed = parse_payment_proof(generate_payment_proof(USER, CONTENT, "1.00"))
    assert not isinstance(parsed, VerifiedProof)


def test_proof_text():
    proof = generate_payment_proof(USER, CONTENT, "1.00")
    assert proof_text(proof) == proof
    verified = require_verified_proof(USER, CONTENT, proof)
    assert proof_text(verified) == proof
    assert str(verified) == proof


# ==============================================================================
# Tests: verify_user_access
# ==============================================================================

def test_verify_valid_proof():
    proof = generate_payment_proof(USER, CONTENT, "1.00")
    result = verify_user_access(USER, CONTENT, proof)
    assert result.is_valid is True
    assert result.amount == "1.00"
    assert result.timestamp.endswith("Z")
    assert result.transaction_id.startswith("tx_")


def test_verify_mints_fresh_transaction_ids():
    proof = generate_payment_proof(USER, CONTENT, "1.00")
    assert verify_user_access(USER, CONTENT, proof).transaction_id != \
        verify_user_access(USER, CONTENT, proof).transaction_id


@pytest.mark.parametrize("proof", [None, "", "invalid-proof", _encode("a:b")])
def test_verify_denies_malformed(proof):
    result = verify_user_access(USER, CONTENT, proof)
    assert result.is_valid is False
    assert result.amount == "0"
    assert result.transaction_id is None
    assert result.timestamp


def test_verify_denies_other_user():
    wrong = generate_payment_proof("0xDifferentUser", CONTENT, "1.00")
    result = verify_user_access(USER, CONTENT, wrong)
    assert result.is_valid is False
    assert result.amount == "0"


def test_verify_denies_other_content():
    wrong = generate_payment_proof(USER, "other-content", "1.00")
    assert verify_user_access(USER, CONTENT, wrong).is_valid is False


def test_verification_to_dict():
    proof = generate_payment_proof(USER, CONTENT, "1.00")
    data = verify_user_access(USER, CONTENT, proof).to_dict()
    assert data["isValid"] is True
    assert data["amount"] == "1.00"
    assert "transactionId" in data

    denied = verify_user_access(USER, CONTENT, "").to_dict()
    assert denied["isValid"] is False
    assert "transactionId" not in denied


# ==============================================================================
# Tests: require_verified_proof
# ==============================================================================

def test_require_verified_proof_ok():
    proof = generate_payment_proof(USER, CONTENT, "1.00")
    verified = require_verified_proof(USER, CONTENT, proof)
    assert verified.amount == "1.00"
    assert require_verified_proof(USER, CONTENT, verified) == verified


@pytest.mark.parametrize(
    "user, content, proof",
    [
        (USER, CONTENT, "invalid-proof"),
        ("0xOther", CONTENT, generate_payment_proof(USER, CONTENT, "1.00")),
        (USER, "other", generate_payment_proof(USER, CONTENT, "1.00")),
    ],
)
def test_require_verified_proof_rejects(user, content, proof):
    with pytest.raises(AccessError, match="Payment proof invalid"):
        require_verified_proof(user, content, proof)


def test_verify_accepts_unpadded_proof():
    proof = _encode("0xUU:c1:1.00:2024-01-01T00:00:00.000Z").rstrip("=")
    result = verify_user_access("0xUU", "c1", proof)
    assert result.is_valid is True
    assert result.amount == "1.00"


def test_require_verified_proof_rejects_hand_built_instance():
    forged = VerifiedProof(
        proof="not-a-proof",
        user_address=USER,
        content_id=CONTENT,
        amount="1.00",
        timestamp="x",
    )
    with pytest.raises(AccessError, match="Payment proof invalid"):
        require_verified_proof(USER, CONTENT, forged)


def test_require_verified_proof_uses_fields_from_raw_proof():
    proof = generate_payment_proof(USER, CONTENT, "0.10")
    inflated = VerifiedProof(
        proof=proof,
        user_address=USER,
        content_id=CONTENT,
        amount="100.00",
        timestamp="x",
    )
    verified = require_verified_proof(USER, CONTENT, inflated)
    assert verified.amount == "0.10"
    assert verified.timestamp != "x"
