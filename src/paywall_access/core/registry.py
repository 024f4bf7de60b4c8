"""
Registry of wrapped content keys on top of a MetadataStore.

Without a store the registry behaves as a stub: ``store_encrypted_key`` still
hands out an opaque id, nothing is kept, and lookups return None.
"""

import base64
import logging
import secrets
import time
from datetime import datetime, timedelta, timezone
from typing import Optional

from .config import AccessConfig, DEFAULT_CONFIG
from .hashing import parse_timestamp
from .models import EncryptedKeyMetadata
from .store import MetadataStore

logger = logging.getLogger(__name__)

KEY_PREFIX = "key:"


def new_storage_id(metadata: EncryptedKeyMetadata) -> str:
    raw = f"{metadata.user_address}:{metadata.content_id}:{int(time.time() * 1000)}:{secrets.token_hex(8)}"
    return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii")


class KeyRegistry:
    def __init__(self, store: Optional[MetadataStore] = None, config: Optional[AccessConfig] = None):
        self.store = store
        self.config = config or DEFAULT_CONFIG

    def store_encrypted_key(self, metadata: EncryptedKeyMetadata) -> str:
        """Persist ``metadata`` and return the id to retrieve it with."""
        storage_id = new_storage_id(metadata)
        if self.store is None:
            logger.debug("No metadata store attached; wrapped key not persisted")
            return storage_id
        self.store.set(KEY_PREFIX + storage_id, metadata.to_dict())
        logger.debug(f"Stored wrapped key for content {metadata.content_id!r}")
        return storage_id

    def retrieve_encrypted_key(self, storage_id: str) -> Optional[EncryptedKeyMetadata]:
        if self.store is None:
            return None
        data = self.store.get(KEY_PREFIX + storage_id)
        if data is None:
            return None
        return EncryptedKeyMetadata.from_dict(data)

    def delete_encrypted_key(self, storage_id: str) -> bool:
        if self.store is None:
            return False
        return self.store.delete(KEY_PREFIX + storage_id)

    def cleanup_expired_access(self, expiration_hours: Optional[float] = None, now: Optional[datetime] = None) -> int:
        """
        Delete wrapped keys created more than ``expiration_hours`` ago,
        defaulting to the configured ``access_ttl_hours``.

        Returns the number of records removed. Records with unreadable
        timestamps are left alone and logged.
        """
        if self.store is None:
            return 0
        if expiration_hours is None:
            expiration_hours = self.config.access_ttl_hours
        now = now or datetime.now(timezone.utc)
        cutoff = now - timedelta(hours=expiration_hours)

        removed = 0
        for key in self.store.keys():
            if not key.startswith(KEY_PREFIX):
                continue
            data = self.store.get(key)
            if data is None:
                continue
            try:
                created = parse_timestamp(data["timestamp"])
            except (KeyError, ValueError):
                logger.warning(f"Skipping {key!r} during cleanup: unreadable timestamp")
                continue
            if created < cutoff and self.store.delete(key):
                removed += 1

        if removed:
            logger.info(f"Cleaned up {removed} expired access record(s)")
        return removed


def store_encrypted_key(metadata: EncryptedKeyMetadata, store: Optional[MetadataStore] = None) -> str:
    return KeyRegistry(store).store_encrypted_key(metadata)


def retrieve_encrypted_key(storage_id: str, store: Optional[MetadataStore] = None) -> Optional[EncryptedKeyMetadata]:
    return KeyRegistry(store).retrieve_encrypted_key(storage_id)


def cleanup_expired_access(store: Optional[MetadataStore] = None, expiration_hours: Optional[float] = None,
                           config: Optional[AccessConfig] = None) -> int:
    return KeyRegistry(store, config).cleanup_expired_access(expiration_hours)
