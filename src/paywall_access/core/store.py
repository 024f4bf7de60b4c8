"""
Metadata store abstraction

Stores hold JSON-serializable dicts under string keys. They are created and
owned by the process that uses them and passed in explicitly; nothing in this
package keeps a module-level store.

Backends:
> InMemoryStore: process-local, thread-safe, lost on exit
> KeyringStore: values as JSON strings in the OS keyring, plus an index entry
  because keyring cannot list accounts
"""

import copy
import json
import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from .exceptions import StorageError
from ..security import keystore

logger = logging.getLogger(__name__)


class MetadataStore(ABC):
    """Key/value interface shared by every store backend."""

    @abstractmethod
    def get(self, key: str) -> Optional[Dict[str, Any]]:
        """Return the value stored under ``key`` or None."""

    @abstractmethod
    def set(self, key: str, value: Dict[str, Any]) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove ``key``; returns False if it was not present."""

    @abstractmethod
    def keys(self) -> List[str]:
        """Every key currently stored."""

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


class InMemoryStore(MetadataStore):
    """Store backed by a dict; safe to share across threads."""

    def __init__(self):
        self._data: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key):
        with self._lock:
            value = self._data.get(key)
            return copy.deepcopy(value) if value is not None else None

    def set(self, key, value):
        with self._lock:
            self._data[key] = copy.deepcopy(value)

    def delete(self, key):
        with self._lock:
            return self._data.pop(key, None) is not None

    def keys(self):
        with self._lock:
            return list(self._data)

    def close(self):
        with self._lock:
            self._data.clear()

    def __len__(self):
        with self._lock:
            return len(self._data)


class KeyringStore(MetadataStore):
    """
    Store that persists values in the OS keyring under ``service``.

    Refuses backends that :func:`keystore.assess_keyring_backend` flags as
    insecure unless ``force=True``.
    """

    INDEX_ACCOUNT = "__index__"

    def __init__(self, service: str, force: bool = False):
        self.service = service
        secure, msg = keystore.assess_keyring_backend()
        if not secure and not force:
            raise StorageError(
                f"refusing to store key metadata in OS keystore: {msg}; "
                "pass force=True to override if you understand the risk"
            )
        logger.debug(f"Keyring store ready for service {service!r}: {msg}")

    def _load_index(self) -> List[str]:
        raw = keystore.load_secret(self.service, self.INDEX_ACCOUNT)
        if raw is None:
            return []
        try:
            return list(json.loads(raw))
        except ValueError as e:
            raise StorageError(f"corrupt keyring index for {self.service!r}") from e

    def _save_index(self, index: List[str]) -> None:
        keystore.save_secret(self.service, self.INDEX_ACCOUNT, json.dumps(index))

    def get(self, key):
        raw = keystore.load_secret(self.service, key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError as e:
            raise StorageError(f"corrupt keyring entry {key!r}") from e

    def set(self, key, value):
        if key == self.INDEX_ACCOUNT:
            raise StorageError(f"{key!r} is reserved")
        keystore.save_secret(self.service, key, json.dumps(value))
        index = self._load_index()
        if key not in index:
            index.append(key)
            self._save_index(index)

    def delete(self, key):
        removed = keystore.delete_secret(self.service, key)
        index = self._load_index()
        if key in index:
            index.remove(key)
            self._save_index(index)
        return removed

    def keys(self):
        return self._load_index()
