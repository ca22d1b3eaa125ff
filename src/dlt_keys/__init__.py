"""
dlt-keys - Ed25519 key management for distributed-ledger clients

Parses keys from raw bytes, hex strings and PEM, derives hierarchical child
keys from mnemonics, and imports/exports passphrase-protected keystores and
encrypted PKCS#8.
"""

from .config import KeystoreConfig, PemConfig
from .crypto import Ed25519PrivateKey, Ed25519PublicKey
from .keys import Mnemonic
from .runtime.errors import *

__version__ = "1.0.0"
__all__ = [
    # Keys
    "Ed25519PrivateKey",
    "Ed25519PublicKey",
    "Mnemonic",

    # Configuration
    "KeystoreConfig",
    "PemConfig",

    # Errors
    "ErrorCode",
    "KeyManagementError",
    "BadKeyError",
    "DerDecodeError",
    "BadPemFileError",
    "KeyMismatchError",
    "UnsupportedOperationError",
]
