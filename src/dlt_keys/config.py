"""Configuration for keystore and encrypted PEM export."""

from dataclasses import dataclass

# Upper bound on PBKDF2 work accepted from a keystore or PEM file
MAX_PBKDF2_ITERATIONS = 10_000_000


@dataclass(frozen=True)
class KeystoreConfig:
    """Parameters used when writing a keystore blob."""
    iterations: int = 262144
    dk_len: int = 32
    salt_length: int = 32
    iv_length: int = 16

    def __post_init__(self):
        if not 1 <= self.iterations <= MAX_PBKDF2_ITERATIONS:
            raise ValueError(f"iterations must be between 1 and {MAX_PBKDF2_ITERATIONS}")
        if self.dk_len != 32:
            # first half is the AES-128 key, second half the MAC key
            raise ValueError("dk_len must be 32")
        if self.salt_length < 16:
            raise ValueError("salt_length must be at least 16 bytes")
        if self.iv_length != 16:
            raise ValueError("iv_length must be 16 for AES-CTR")


@dataclass(frozen=True)
class PemConfig:
    """Parameters used when writing an encrypted PKCS#8 PEM."""
    iterations: int = 2048
    salt_length: int = 16

    def __post_init__(self):
        if not 1 <= self.iterations <= MAX_PBKDF2_ITERATIONS:
            raise ValueError(f"iterations must be between 1 and {MAX_PBKDF2_ITERATIONS}")
        if self.salt_length < 8:
            raise ValueError("salt_length must be at least 8 bytes")


DEFAULT_KEYSTORE_CONFIG = KeystoreConfig()
DEFAULT_PEM_CONFIG = PemConfig()

__all__ = [
    "MAX_PBKDF2_ITERATIONS",
    "KeystoreConfig",
    "PemConfig",
    "DEFAULT_KEYSTORE_CONFIG",
    "DEFAULT_PEM_CONFIG",
]
