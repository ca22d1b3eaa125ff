"""
Cryptographic primitives for ledger client keys.

Provides Ed25519 key entities, hash/KDF helpers and hierarchical derivation.
"""

from .ed25519 import Ed25519PrivateKey, Ed25519PublicKey, KeyShape
from .hash_utils import hmac_sha512, pbkdf2
from .hd import DERIVATION_PATH, derive_child_key, derive_path, master_key_from_seed, seed_from_mnemonic

__all__ = [
    "Ed25519PrivateKey",
    "Ed25519PublicKey",
    "KeyShape",
    "hmac_sha512",
    "pbkdf2",
    "DERIVATION_PATH",
    "derive_child_key",
    "derive_path",
    "master_key_from_seed",
    "seed_from_mnemonic",
]
