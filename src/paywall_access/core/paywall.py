"""
Content paywall: the integration point for the access primitives.

Flow:
==============================
 1. creator publishes content   -> key generated, content encrypted,
                                   key wrapped for paid access, wrapped key registered
 2. buyer pays                   -> payment recorded in the ledger (by the app)
 3. buyer unlocks                -> ledger checked, paid-access key unwrapped,
                                   content decrypted
 4. optional per-user grant      -> verified proof exchanged for a key wrapped
                                   to that buyer alone
==============================
The paywall owns no state of its own; the ledger and registry carry the
injected stores.
"""

import logging
from typing import Optional

from .config import AccessConfig, DEFAULT_CONFIG
from .exceptions import AccessError
from .ledger import PaymentLedger
from .models import EncryptedKeyMetadata, PublishedContent
from .registry import KeyRegistry
from ..security.access import (
    decrypt_key_for_paid_access,
    encrypt_key_for_paid_access,
    encrypt_key_for_user,
)
from ..security.crypto import decrypt_content, encrypt_content, generate_encryption_key
from ..security.proof import ProofLike, require_verified_proof

logger = logging.getLogger(__name__)


class ContentPaywall:
    """Publish encrypted content and release it to paying users."""

    def __init__(self, ledger: PaymentLedger, registry: KeyRegistry, config: Optional[AccessConfig] = None):
        self.ledger = ledger
        self.registry = registry
        self.config = config or DEFAULT_CONFIG

    def publish(self, content: str, content_id: str, price: str, creator: str) -> PublishedContent:
        """
        Encrypt ``content`` under a fresh key and register the key for paid access.

        The plain content key is not returned; it is only recoverable through
        the wrapped record.
        """
        key = generate_encryption_key()
        encrypted_content = encrypt_content(content, key)
        key_metadata = encrypt_key_for_paid_access(key, content_id, price, config=self.config)
        storage_id = self.registry.store_encrypted_key(key_metadata)

        logger.info(f"Published content {content_id!r} at price {price}")
        return PublishedContent(
            content_id=content_id,
            encrypted_content=encrypted_content,
            key_metadata=key_metadata,
            storage_id=storage_id,
            price=price,
            creator=creator,
        )

    def _content_key(self, published: PublishedContent, user_address: str, price: str) -> str:
        return decrypt_key_for_paid_access(
            published.key_metadata, user_address, published.content_id, price, config=self.config
        )

    def unlock(self, published: PublishedContent, user_address: str, price: str) -> str:
        """Return the plaintext if ``user_address`` has a recorded payment."""
        if not self.ledger.has_paid(published.content_id, user_address):
            logger.warning(f"Unlock refused for content {published.content_id!r}: no payment on record")
            raise AccessError("Payment required")

        key = self._content_key(published, user_address, price)
        return decrypt_content(published.encrypted_content, key)

    def grant_user_access(self, published: PublishedContent, user_address: str,
                          payment_proof: ProofLike) -> EncryptedKeyMetadata:
        """Exchange a payment proof for a content key wrapped to this user alone."""
        proof = require_verified_proof(user_address, published.content_id, payment_proof)
        if proof.amount != published.price:
            raise AccessError("Payment amount mismatch")

        key = self._content_key(published, user_address, published.price)
        user_metadata = encrypt_key_for_user(key, user_address, published.content_id, proof, config=self.config)
        self.registry.store_encrypted_key(user_metadata)
        return user_metadata
