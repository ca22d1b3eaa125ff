"""Hierarchical deterministic derivation for Ed25519 keys (SLIP-0010, hardened only)."""

import logging
import unicodedata
from typing import Iterable, Sequence, Tuple

from .hash_utils import hmac_sha512, pbkdf2

logger = logging.getLogger(__name__)

HARDENED_BIT = 0x80000000
ED25519_SEED_KEY = b"ed25519 seed"
MNEMONIC_SALT_PREFIX = "mnemonic"
MNEMONIC_PBKDF2_ROUNDS = 2048

# purpose / coin type / account / change; every level is hardened
DERIVATION_PATH: Tuple[int, ...] = (44, 3030, 0, 0)


def seed_from_mnemonic(words: Sequence[str], passphrase: str = "") -> bytes:
    """
    Stretch a mnemonic into a 64-byte root seed.

    Args:
        words: Mnemonic words in order
        passphrase: Optional passphrase; empty if none

    Returns:
        64-byte seed from PBKDF2-HMAC-SHA512 over the space-joined words
    """
    phrase = unicodedata.normalize("NFKD", " ".join(words))
    salt = unicodedata.normalize("NFKD", MNEMONIC_SALT_PREFIX + (passphrase or ""))
    return pbkdf2("sha512", phrase, salt, MNEMONIC_PBKDF2_ROUNDS, 64)


def master_key_from_seed(seed: bytes) -> Tuple[bytes, bytes]:
    """
    Compute the root key and chain code for a seed.

    Returns:
        (key_bytes, chain_code), 32 bytes each
    """
    digest = hmac_sha512(ED25519_SEED_KEY, seed)
    return digest[:32], digest[32:]


def derive_child_key(key_bytes: bytes, chain_code: bytes, index: int) -> Tuple[bytes, bytes]:
    """
    Derive a hardened child of (key_bytes, chain_code).

    The hardened bit is always set, so index 0 and index 0x80000000 give the
    same child.

    Args:
        key_bytes: 32-byte parent key
        chain_code: 32-byte parent chain code
        index: Unsigned 32-bit child index

    Returns:
        (child_key_bytes, child_chain_code)

    Raises:
        ValueError: If an input has the wrong size or index is out of range
    """
    if len(key_bytes) != 32:
        raise ValueError(f"Parent key must be 32 bytes, got {len(key_bytes)}")
    if len(chain_code) != 32:
        raise ValueError(f"Chain code must be 32 bytes, got {len(chain_code)}")
    if not 0 <= index <= 0xFFFFFFFF:
        raise ValueError(f"Child index must be an unsigned 32-bit integer, got {index}")

    data = b"\x00" + bytes(key_bytes) + (index | HARDENED_BIT).to_bytes(4, "big")
    digest = hmac_sha512(bytes(chain_code), data)
    return digest[:32], digest[32:]


def derive_path(key_bytes: bytes, chain_code: bytes,
                path: Iterable[int] = DERIVATION_PATH) -> Tuple[bytes, bytes]:
    """Fold ``path`` left to right through derive_child_key."""
    for index in path:
        key_bytes, chain_code = derive_child_key(key_bytes, chain_code, index)
    return key_bytes, chain_code


def key_from_mnemonic_words(words: Sequence[str], passphrase: str = "",
                            path: Iterable[int] = DERIVATION_PATH) -> Tuple[bytes, bytes]:
    """
    Derive the account key for a (non-legacy) mnemonic.

    Returns:
        (key_bytes, chain_code) at the end of ``path``
    """
    seed = seed_from_mnemonic(words, passphrase)
    key_bytes, chain_code = master_key_from_seed(seed)
    path = tuple(path)
    logger.debug(f"Deriving mnemonic key along path {list(path)}")
    return derive_path(key_bytes, chain_code, path)


__all__ = [
    "HARDENED_BIT",
    "DERIVATION_PATH",
    "MNEMONIC_PBKDF2_ROUNDS",
    "seed_from_mnemonic",
    "master_key_from_seed",
    "derive_child_key",
    "derive_path",
    "key_from_mnemonic_words",
]
