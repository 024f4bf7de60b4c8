"""OS keystore integration using keyring for optional persistence of wrapped keys.

This module provides a tiny wrapper around `keyring` to store and retrieve
text secrets (JSON documents of wrapped-key metadata) under a service/account
pair. Wrapped keys are already encrypted, but the keyring still keeps them out
of plain files. Do not assume keyring is hardware-backed on all platforms.
"""
from typing import Optional

try:
    import keyring
    from keyring.errors import PasswordDeleteError
except ImportError:
    keyring = None
    PasswordDeleteError = None


def _require_keyring():
    if keyring is None:
        raise RuntimeError("keyring package is not available; install keyring to use keystore features")


def save_secret(service: str, account: str, secret: str) -> None:
    """Persist ``secret`` in the OS keystore under (service, account)."""
    _require_keyring()
    keyring.set_password(service, account, secret)


# backend class-name fragments that keep records unencrypted, or not at all
_UNENCRYPTED_BACKENDS = ("Plaintext", "Uncrypted", "Simple", "File", "Null", "Fail")
# platform vaults that encrypt at rest
_PLATFORM_VAULTS = ("WinVault", "Keychain", "SecretService", "KWallet")


def assess_keyring_backend() -> tuple[bool, str]:
    """Decide whether the active keyring backend may hold wrapped-key records.

    Returns ``(usable, reason)``. ``KeyringStore`` refuses to start when
    ``usable`` is False unless forced.
    """
    if keyring is None:
        return False, "keyring is not installed"

    try:
        backend = keyring.get_keyring()
    except Exception as e:
        return False, f"could not load a keyring backend: {e}"

    name = backend.__class__.__name__
    priority = getattr(backend, "priority", None)
    label = f"{name} (priority {priority})"

    if any(tok in name for tok in _UNENCRYPTED_BACKENDS):
        return False, f"{label} does not encrypt stored records"

    if priority is not None and priority <= 0:
        return False, f"{label} is a fallback; no platform vault is available"

    if any(tok in name for tok in _PLATFORM_VAULTS):
        return True, f"using platform vault {label}"

    return True, f"using unrecognised backend {label}"


def load_secret(service: str, account: str) -> Optional[str]:
    """Load a persisted secret from the OS keystore; returns None if absent."""
    _require_keyring()
    return keyring.get_password(service, account)


def delete_secret(service: str, account: str) -> bool:
    """Remove the secret from the OS keystore; returns False if it was not there."""
    _require_keyring()
    try:
        keyring.delete_password(service, account)
    except PasswordDeleteError:
        return False
    return True
