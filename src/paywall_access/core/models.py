"""
Base data models for wrapped keys, payment proofs and payments
"""

from dataclasses import dataclass, field
from typing import Optional, Union, Dict, Any

from .hashing import utc_timestamp

PAID_ACCESS_SENTINEL = "content"

# camelCase keys keep records compatible with the JSON documents the web app stores
_METADATA_KEYS = {
    "encrypted_key": "encryptedKey",
    "user_address": "userAddress",
    "content_id": "contentId",
    "payment_proof": "paymentProof",
    "timestamp": "timestamp",
    "access_token": "accessToken",
    "signature": "signature",
    "kdf": "kdf",
}


@dataclass(frozen=True)
class UserBound:
    # key wrapped for one user holding one payment proof
    user_address: str
    payment_proof: str


@dataclass(frozen=True)
class PriceBound:
    # key wrapped for anyone who pays the posted price for a content id
    content_id: str
    price: str


AccessBinding = Union[UserBound, PriceBound]


def paid_access_proof(content_id: str, price: str) -> str:
    return f"content:{content_id}:{price}"


@dataclass(frozen=True)
class EncryptedKeyMetadata:
    """
    A content key wrapped for a specific access context.

    ``signature`` is the base64 SHA-256 of ``user:content:timestamp:proof`` and
    is re-checked on unwrap. ``access_token`` hashes ``user:content:timestamp``
    and is only meant as a lookup key for callers.
    """

    encrypted_key: str
    user_address: str
    content_id: str
    payment_proof: str
    timestamp: str
    access_token: str
    signature: str
    kdf: str = "hkdf"

    @property
    def binding(self) -> AccessBinding:
        """Which kind of access this record grants."""
        if self.user_address == PAID_ACCESS_SENTINEL:
            prefix = paid_access_proof(self.content_id, "")
            if self.payment_proof.startswith(prefix):
                return PriceBound(self.content_id, self.payment_proof[len(prefix):])
        return UserBound(self.user_address, self.payment_proof)

    def to_dict(self) -> Dict[str, str]:
        return {wire: getattr(self, attr) for attr, wire in _METADATA_KEYS.items()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EncryptedKeyMetadata":
        """
        Build a record from its JSON form.

        Records without a ``kdf`` entry predate pluggable derivation and used
        the single SHA-256 hash.
        """
        missing = [wire for attr, wire in _METADATA_KEYS.items() if attr != "kdf" and wire not in data]
        if missing:
            raise ValueError(f"Encrypted key metadata missing fields: {', '.join(missing)}")
        values = {attr: str(data[wire]) for attr, wire in _METADATA_KEYS.items() if attr != "kdf"}
        return cls(kdf=str(data.get("kdf", "sha256")), **values)

    def __repr__(self):
        # keep ciphertext and proof out of logs
        return (
            f"EncryptedKeyMetadata(user_address={self.user_address!r}, "
            f"content_id={self.content_id!r}, timestamp={self.timestamp!r}, kdf={self.kdf!r})"
        )


@dataclass(frozen=True)
class PaymentVerification:
    is_valid: bool
    amount: str
    timestamp: str
    transaction_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"isValid": self.is_valid, "amount": self.amount, "timestamp": self.timestamp}
        if self.transaction_id is not None:
            data["transactionId"] = self.transaction_id
        return data


@dataclass(frozen=True)
class ParsedProof:
    """The fields decoded from a proof string, not yet checked against anything."""

    proof: str
    user_address: str
    content_id: str
    amount: str
    timestamp: str


@dataclass(frozen=True)
class VerifiedProof:
    """
    A payment proof whose embedded context has been checked.

    ``require_verified_proof`` builds these from a fresh parse of ``proof``
    and re-parses any instance handed back to it, so the fields always
    describe the raw proof string.
    """

    proof: str
    user_address: str
    content_id: str
    amount: str
    timestamp: str

    def __str__(self):
        return self.proof


@dataclass(frozen=True)
class PaymentRecord:
    content_id: str
    user_address: str
    amount: str
    tx_hash: str
    timestamp: str = field(default_factory=utc_timestamp)

    def to_dict(self) -> Dict[str, str]:
        return {
            "contentId": self.content_id,
            "userAddress": self.user_address,
            "amount": self.amount,
            "txHash": self.tx_hash,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PaymentRecord":
        return cls(
            content_id=data["contentId"],
            user_address=data["userAddress"],
            amount=data["amount"],
            tx_hash=data["txHash"],
            timestamp=data.get("timestamp") or utc_timestamp(),
        )


@dataclass(frozen=True)
class PublishedContent:
    content_id: str
    encrypted_content: str
    key_metadata: EncryptedKeyMetadata
    storage_id: str
    price: str
    creator: str
