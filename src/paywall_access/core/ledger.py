"""
Payment ledger on top of a MetadataStore.

Records which user paid for which content. Addresses are compared
case-insensitively since wallets report checksummed and lowercase forms of the
same address.
"""

import logging
import secrets
from typing import Optional

from .models import PaymentRecord
from .store import MetadataStore

logger = logging.getLogger(__name__)


def payment_key(content_id: str, user_address: str) -> str:
    return f"payment:{content_id}:{user_address.lower()}"


class PaymentLedger:
    def __init__(self, store: MetadataStore):
        self.store = store

    def record_payment(self, content_id: str, user_address: str, amount: str,
                       tx_hash: Optional[str] = None) -> PaymentRecord:
        record = PaymentRecord(
            content_id=content_id,
            user_address=user_address,
            amount=amount,
            tx_hash=tx_hash or "0x" + secrets.token_hex(32),
        )
        self.store.set(payment_key(content_id, user_address), record.to_dict())
        logger.info(f"Recorded payment of {amount} for content {content_id!r}")
        return record

    def get_payment(self, content_id: str, user_address: str) -> Optional[PaymentRecord]:
        data = self.store.get(payment_key(content_id, user_address))
        if data is None:
            return None
        return PaymentRecord.from_dict(data)

    def has_paid(self, content_id: str, user_address: str) -> bool:
        return self.get_payment(content_id, user_address) is not None
