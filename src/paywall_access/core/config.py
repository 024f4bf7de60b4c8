"""
Configuration for the paywall access module.

A single frozen dataclass carries every tunable the primitives read. Functions
accept an optional ``config`` argument and fall back to ``DEFAULT_CONFIG``.
"""

import logging
import os
from dataclasses import dataclass

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

SUPPORTED_KDFS = ("sha256", "hkdf", "argon2id")


@dataclass(frozen=True)
class AccessConfig:
    """Settings for key generation, wrapping and access expiry."""

    kdf: str = "hkdf"  # "sha256", "hkdf", "argon2id"
    argon2_time_cost: int = 3
    argon2_memory_cost: int = 65536
    argon2_parallelism: int = 1
    access_ttl_hours: float = 24

    def __post_init__(self):
        """Validate settings."""
        if self.kdf not in SUPPORTED_KDFS:
            raise ConfigurationError(f"Invalid key derivation: {self.kdf}")

        if self.argon2_time_cost < 1 or self.argon2_parallelism < 1:
            raise ConfigurationError("argon2 costs must be positive")

        # argon2 requires at least 8 KiB per lane
        if self.argon2_memory_cost < 8 * self.argon2_parallelism:
            raise ConfigurationError("argon2_memory_cost too small for parallelism")

        if self.access_ttl_hours <= 0:
            raise ConfigurationError("access_ttl_hours must be positive")

        logger.debug(f"Access configured: kdf={self.kdf}, ttl={self.access_ttl_hours}h")

    @classmethod
    def from_env(cls, environ=None) -> "AccessConfig":
        """Build a config from ``PAYWALL_ACCESS_*`` environment variables."""
        environ = os.environ if environ is None else environ
        kwargs = {}
        if environ.get("PAYWALL_ACCESS_KDF"):
            kwargs["kdf"] = environ["PAYWALL_ACCESS_KDF"].strip().lower()
        if environ.get("PAYWALL_ACCESS_TTL_HOURS"):
            try:
                kwargs["access_ttl_hours"] = float(environ["PAYWALL_ACCESS_TTL_HOURS"])
            except ValueError as e:
                raise ConfigurationError(f"Invalid PAYWALL_ACCESS_TTL_HOURS: {e}") from e
        return cls(**kwargs)


DEFAULT_CONFIG = AccessConfig()
