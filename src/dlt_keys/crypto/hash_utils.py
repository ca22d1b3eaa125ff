"""
Hash and key-derivation helpers.

Thin wrappers over ``cryptography`` HMAC and PBKDF2 so the rest of the
package works with plain bytes and hash names.
"""

from typing import Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, hmac
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

_HASHES = {
    "sha1": hashes.SHA1,
    "sha224": hashes.SHA224,
    "sha256": hashes.SHA256,
    "sha384": hashes.SHA384,
    "sha512": hashes.SHA512,
}


def _to_bytes(value: Union[str, bytes]) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


def get_hash(name: str) -> hashes.HashAlgorithm:
    """
    Look up a hash algorithm by name.

    Args:
        name: One of sha1, sha224, sha256, sha384, sha512

    Raises:
        ValueError: If the hash is not supported
    """
    try:
        return _HASHES[name.lower()]()
    except KeyError:
        raise ValueError(f"Unsupported hash algorithm: {name}") from None


def hmac_digest(algorithm: str, key: Union[str, bytes], data: bytes) -> bytes:
    """
    Compute an HMAC.

    Args:
        algorithm: Hash name
        key: HMAC key (str is UTF-8 encoded)
        data: Message

    Returns:
        MAC bytes
    """
    mac = hmac.HMAC(_to_bytes(key), get_hash(algorithm))
    mac.update(data)
    return mac.finalize()


def hmac_sha512(key: Union[str, bytes], data: bytes) -> bytes:
    """HMAC-SHA512, 64 bytes."""
    return hmac_digest("sha512", key, data)


def hmac_verify(algorithm: str, key: bytes, data: bytes, expected: bytes) -> bool:
    """
    Check an HMAC in constant time.

    Returns:
        True if ``expected`` is the MAC of ``data`` under ``key``
    """
    mac = hmac.HMAC(key, get_hash(algorithm))
    mac.update(data)
    try:
        mac.verify(expected)
    except InvalidSignature:
        return False
    return True


def pbkdf2(algorithm: str, password: Union[str, bytes], salt: Union[str, bytes],
           iterations: int, length: int) -> bytes:
    """
    Derive key material with PBKDF2-HMAC.

    Args:
        algorithm: Hash name used for the PRF
        password: Password (str is UTF-8 encoded)
        salt: Salt (str is UTF-8 encoded)
        iterations: Iteration count
        length: Output length in bytes

    Returns:
        Derived key bytes
    """
    kdf = PBKDF2HMAC(
        algorithm=get_hash(algorithm),
        length=length,
        salt=_to_bytes(salt),
        iterations=iterations,
    )
    return kdf.derive(_to_bytes(password))


__all__ = [
    "get_hash",
    "hmac_digest",
    "hmac_sha512",
    "hmac_verify",
    "pbkdf2",
]
