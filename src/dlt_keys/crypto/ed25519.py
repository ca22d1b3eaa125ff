r"""
Ed25519 key entities.

Private keys can be read from raw bytes, hex strings, mnemonics, keystores
and PKCS#8 PEM, and written back to all of those except mnemonics. Signing
and public key computation are delegated to ``cryptography``.
"""

from __future__ import annotations
import asyncio
import logging
import re
from enum import Enum
from functools import cached_property
from typing import Optional, Tuple, Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey as CryptoEd25519PrivateKey,
    Ed25519PublicKey as CryptoEd25519PublicKey
)
from cryptography.hazmat.primitives.serialization import Encoding, NoEncryption, PrivateFormat, PublicFormat

from ..config import KeystoreConfig, PemConfig
from ..keys.keystore import create_keystore, load_keystore
from ..keys.mnemonic import Mnemonic
from ..keys.pem import private_key_bytes_from_pem, private_key_to_pem
from ..runtime.errors import BadKeyError, UnsupportedOperationError
from .hd import DERIVATION_PATH, derive_child_key, key_from_mnemonic_words

logger = logging.getLogger(__name__)

# PKCS#8 PrivateKeyInfo header for an Ed25519 seed (RFC 8410)
ED25519_PRIVATE_KEY_DER_PREFIX = bytes.fromhex("302e020100300506032b657004220420")
ED25519_PRIVATE_KEY_PREFIX = ED25519_PRIVATE_KEY_DER_PREFIX.hex()

# SubjectPublicKeyInfo header for an Ed25519 public key
ED25519_PUBLIC_KEY_DER_PREFIX = bytes.fromhex("302a300506032b6570032100")
ED25519_PUBLIC_KEY_PREFIX = ED25519_PUBLIC_KEY_DER_PREFIX.hex()

SEED_LENGTH = 32
PUBLIC_KEY_LENGTH = 32
SECRET_KEY_LENGTH = 64
SIGNATURE_LENGTH = 64

_HEX_PATTERN = re.compile(r"[0-9a-fA-F]*")


class KeyShape(Enum):
    """Recognized private key byte layouts, keyed by length."""

    SEED = 32
    DER_PREFIXED_SEED = 48
    SEED_AND_PUBLIC_KEY = 64


def _parse_private_key_bytes(data: bytes) -> Tuple[bytes, Optional[bytes]]:
    """Return (seed, claimed public key or None) for a supported layout."""
    data = bytes(data)
    try:
        shape = KeyShape(len(data))
    except ValueError:
        raise BadKeyError(f"invalid private key length: {len(data)} bytes") from None

    if shape is KeyShape.SEED:
        return data, None
    if shape is KeyShape.DER_PREFIXED_SEED:
        prefix = ED25519_PRIVATE_KEY_DER_PREFIX
        if data[:len(prefix)] != prefix:
            raise BadKeyError("private key does not start with the Ed25519 DER prefix")
        return data[len(prefix):], None
    return data[:SEED_LENGTH], data[SEED_LENGTH:]


def _hex_to_bytes(text: str) -> bytes:
    # bytes.fromhex() skips whitespace, which would shift the length dispatch
    if not _HEX_PATTERN.fullmatch(text) or len(text) % 2:
        raise BadKeyError("key string is not a plain hex string")
    return bytes.fromhex(text)


class Ed25519PublicKey:
    """
    Ed25519 public key.

    Provides verification operations and serialization.
    """

    def __init__(self, public_key_bytes: bytes):
        """
        Initialize from 32-byte public key.

        Args:
            public_key_bytes: 32-byte Ed25519 public key

        Raises:
            BadKeyError: If key is invalid
        """
        public_key_bytes = bytes(public_key_bytes)
        if len(public_key_bytes) != PUBLIC_KEY_LENGTH:
            raise BadKeyError(f"Ed25519 public key must be 32 bytes, got {len(public_key_bytes)}")

        try:
            self._crypto_key = CryptoEd25519PublicKey.from_public_bytes(public_key_bytes)
        except ValueError as e:
            raise BadKeyError(f"Invalid Ed25519 public key: {e}", cause=e) from e
        self._key_bytes = public_key_bytes

    @classmethod
    def from_bytes(cls, key_bytes: bytes) -> Ed25519PublicKey:
        """Create public key from raw bytes or DER SubjectPublicKeyInfo bytes."""
        key_bytes = bytes(key_bytes)
        if len(key_bytes) == len(ED25519_PUBLIC_KEY_DER_PREFIX) + PUBLIC_KEY_LENGTH:
            if not key_bytes.startswith(ED25519_PUBLIC_KEY_DER_PREFIX):
                raise BadKeyError("public key does not start with the Ed25519 DER prefix")
            key_bytes = key_bytes[len(ED25519_PUBLIC_KEY_DER_PREFIX):]
        return cls(key_bytes)

    @classmethod
    def from_string(cls, key_str: str) -> Ed25519PublicKey:
        """Create public key from a raw or DER-prefixed hex string."""
        if len(key_str) == 2 * PUBLIC_KEY_LENGTH:
            return cls(_hex_to_bytes(key_str))
        if len(key_str) == len(ED25519_PUBLIC_KEY_PREFIX) + 2 * PUBLIC_KEY_LENGTH \
                and key_str.lower().startswith(ED25519_PUBLIC_KEY_PREFIX):
            return cls(_hex_to_bytes(key_str[len(ED25519_PUBLIC_KEY_PREFIX):]))
        raise BadKeyError(f"invalid public key string length: {len(key_str)}")

    def to_bytes(self) -> bytes:
        """Get the 32-byte public key."""
        return self._key_bytes

    def to_string(self, raw: bool = False) -> str:
        """Hex form; DER-prefixed unless ``raw``."""
        return ("" if raw else ED25519_PUBLIC_KEY_PREFIX) + self._key_bytes.hex()

    def verify(self, signature: bytes, message: bytes) -> bool:
        """
        Verify a signature against a message.

        Args:
            signature: 64-byte Ed25519 signature
            message: Message that was signed

        Returns:
            True if signature is valid
        """
        if len(signature) != SIGNATURE_LENGTH:
            return False

        try:
            self._crypto_key.verify(bytes(signature), bytes(message))
        except InvalidSignature:
            return False
        return True

    def __eq__(self, other) -> bool:
        """Check equality with another public key."""
        if not isinstance(other, Ed25519PublicKey):
            return False
        return self._key_bytes == other._key_bytes

    def __hash__(self) -> int:
        return hash(self._key_bytes)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"Ed25519PublicKey.from_string('{self.to_string(raw=True)}')"


class Ed25519PrivateKey:
    """
    Ed25519 private key.

    Holds the 64-byte secret (seed followed by public key) and, for keys
    that came from a mnemonic or from another derivable key, a chain code
    that enables child key derivation. Instances are immutable.
    """

    def __init__(self, private_key_bytes: bytes, chain_code: Optional[bytes] = None):
        """
        Initialize from private key bytes.

        Args:
            private_key_bytes: 32-byte seed, 48-byte DER-prefixed seed or
                64-byte seed + public key
            chain_code: Optional 32-byte chain code for child derivation

        Raises:
            BadKeyError: If key is invalid
        """
        seed, claimed_public = _parse_private_key_bytes(private_key_bytes)

        self._signing_key = CryptoEd25519PrivateKey.from_private_bytes(seed)
        public_bytes = self._signing_key.public_key().public_bytes(
            encoding=Encoding.Raw,
            format=PublicFormat.Raw
        )
        if claimed_public is not None and claimed_public != public_bytes:
            raise BadKeyError("public key half does not match the private key seed")

        if chain_code is not None:
            chain_code = bytes(chain_code)
            if len(chain_code) != 32:
                raise BadKeyError(f"chain code must be 32 bytes, got {len(chain_code)}")

        self._secret = seed + public_bytes
        self._public_key = Ed25519PublicKey(public_bytes)
        self._chain_code = chain_code

    @classmethod
    def generate(cls) -> Ed25519PrivateKey:
        """
        Generate a new random Ed25519 private key.

        This key will not support child key derivation.
        """
        crypto_key = CryptoEd25519PrivateKey.generate()
        private_bytes = crypto_key.private_bytes(
            encoding=Encoding.Raw,
            format=PrivateFormat.Raw,
            encryption_algorithm=NoEncryption()
        )
        return cls(private_bytes)

    @classmethod
    def from_bytes(cls, key_bytes: bytes) -> Ed25519PrivateKey:
        """
        Recover a private key from its raw bytes form.

        Accepts a 32-byte seed, a 48-byte DER-prefixed seed or 64 bytes of
        seed followed by public key. This key will not support child key
        derivation.
        """
        return cls(key_bytes)

    @classmethod
    def from_string(cls, key_str: str) -> Ed25519PrivateKey:
        """
        Recover a private key from a hex string.

        Accepts 64 or 128 hex characters, or 96 characters starting with the
        DER prefix. This key will not support child key derivation.
        """
        length = len(key_str)
        if length in (2 * SEED_LENGTH, 2 * SECRET_KEY_LENGTH):
            return cls(_hex_to_bytes(key_str))
        if length == len(ED25519_PRIVATE_KEY_PREFIX) + 2 * SEED_LENGTH:
            if key_str.lower().startswith(ED25519_PRIVATE_KEY_PREFIX):
                return cls(_hex_to_bytes(key_str[len(ED25519_PRIVATE_KEY_PREFIX):]))
            raise BadKeyError("private key string does not start with the Ed25519 DER prefix")
        raise BadKeyError(f"invalid private key string length: {length}")

    @classmethod
    def from_mnemonic(cls, mnemonic: Union[Mnemonic, str], passphrase: str = "") -> Ed25519PrivateKey:
        """
        Recover a key from a mnemonic.

        Non-legacy phrases produce a key at path m/44'/3030'/0'/0' that
        supports child derivation. Legacy phrases are delegated to the
        mnemonic's legacy deriver and do not support derivation.

        Args:
            mnemonic: Mnemonic, or a space-separated phrase
            passphrase: Optional passphrase mixed into the seed
        """
        if isinstance(mnemonic, str):
            mnemonic = Mnemonic.from_string(mnemonic)

        if mnemonic.is_legacy:
            logger.debug("Deriving key from legacy mnemonic")
            return cls(mnemonic.to_legacy_seed())

        key_bytes, chain_code = key_from_mnemonic_words(mnemonic.words, passphrase, DERIVATION_PATH)
        return cls(key_bytes, chain_code=chain_code)

    @classmethod
    def from_keystore(cls, keystore: bytes, passphrase: str) -> Ed25519PrivateKey:
        """
        Recover a private key from a keystore created by to_keystore().

        This key will not support child key derivation.

        Raises:
            KeyMismatchError: If the passphrase is incorrect or the keystore was altered
            BadKeyError: If the keystore is malformed
        """
        return cls(load_keystore(keystore, passphrase))

    @classmethod
    def from_pem(cls, pem: str, passphrase: Optional[str] = None) -> Ed25519PrivateKey:
        """
        Recover a private key from PEM text.

        With a passphrase the first ``ENCRYPTED PRIVATE KEY`` section is
        decrypted; otherwise the first ``PRIVATE KEY`` section is read.

        Raises:
            BadPemFileError: If the section markers are missing
            BadKeyError: If the key cannot be decoded or decrypted
        """
        return cls(private_key_bytes_from_pem(pem, passphrase))

    @property
    def public_key(self) -> Ed25519PublicKey:
        """Get the corresponding public key."""
        return self._public_key

    @property
    def chain_code(self) -> Optional[bytes]:
        return self._chain_code

    @property
    def supports_derivation(self) -> bool:
        """Check if this private key supports deriving child keys."""
        return self._chain_code is not None

    def _derive_child(self, index: int) -> Ed25519PrivateKey:
        if self._chain_code is None:
            raise UnsupportedOperationError("this Ed25519 private key does not support key derivation")

        key_bytes, chain_code = derive_child_key(self._secret[:SEED_LENGTH], self._chain_code, index)
        logger.debug(f"Derived child key at index {index}")
        return Ed25519PrivateKey(key_bytes, chain_code=chain_code)

    def derive(self, index: int) -> Ed25519PrivateKey:
        """
        Derive the hardened child key at ``index``.

        Raises:
            UnsupportedOperationError: If this key has no chain code
        """
        return self._derive_child(index)

    async def derive2(self, index: int) -> Ed25519PrivateKey:
        """Same as derive(), run in the event loop's default executor."""
        if self._chain_code is None:
            raise UnsupportedOperationError("this Ed25519 private key does not support key derivation")
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._derive_child, index)

    def sign(self, message: bytes) -> bytes:
        """
        Sign a message.

        Args:
            message: Message to sign

        Returns:
            64-byte Ed25519 signature
        """
        return self._signing_key.sign(bytes(message))

    def to_bytes(self) -> bytes:
        """Get the 32-byte private key seed."""
        return self._secret[:SEED_LENGTH]

    @cached_property
    def _string_raw(self) -> str:
        return self._secret[:SEED_LENGTH].hex()

    def to_string(self, raw: bool = False) -> str:
        """Hex form of the seed; DER-prefixed unless ``raw``."""
        return ("" if raw else ED25519_PRIVATE_KEY_PREFIX) + self._string_raw

    def to_keystore(self, passphrase: str, config: Optional[KeystoreConfig] = None) -> bytes:
        """
        Create a keystore blob protected by ``passphrase``.

        The chain code is not stored, so a key restored with from_keystore()
        never supports derivation.
        """
        return create_keystore(self.to_bytes(), passphrase, config)

    def to_pem(self, passphrase: Optional[str] = None, config: Optional[PemConfig] = None) -> str:
        """Write the key as PKCS#8 PEM, encrypted when a passphrase is given."""
        return private_key_to_pem(self.to_bytes(), passphrase, config)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Ed25519PrivateKey):
            return False
        return self._secret == other._secret

    def __hash__(self) -> int:
        return hash(self._public_key)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"Ed25519PrivateKey(public={self._public_key.to_string(raw=True)})"


__all__ = [
    "ED25519_PRIVATE_KEY_PREFIX",
    "ED25519_PUBLIC_KEY_PREFIX",
    "KeyShape",
    "Ed25519PublicKey",
    "Ed25519PrivateKey",
]
