"""
Key import/export formats.

Provides the keystore codec, PKCS#8 structures, PEM envelopes and the
mnemonic container.
"""

from .keystore import create_keystore, load_keystore
from .mnemonic import Mnemonic
from .pem import find_pem_block, private_key_bytes_from_pem, private_key_to_pem
from .pkcs import EncryptedPrivateKeyInfo, PrivateKeyInfo

__all__ = [
    "create_keystore",
    "load_keystore",
    "Mnemonic",
    "find_pem_block",
    "private_key_bytes_from_pem",
    "private_key_to_pem",
    "EncryptedPrivateKeyInfo",
    "PrivateKeyInfo",
]
