"""
PEM envelopes for Ed25519 private keys.

Reads the first ``PRIVATE KEY`` or ``ENCRYPTED PRIVATE KEY`` section of a
PEM document and writes keys back out in the same two forms.
"""

import base64
import binascii
import logging
import textwrap
from typing import Optional

from ..config import PemConfig
from ..runtime.errors import BadKeyError, BadPemFileError
from .pkcs import EncryptedPrivateKeyInfo, PrivateKeyInfo

logger = logging.getLogger(__name__)

PRIVATE_KEY_LABEL = "PRIVATE KEY"
ENCRYPTED_PRIVATE_KEY_LABEL = "ENCRYPTED PRIVATE KEY"


def _markers(label: str):
    return f"-----BEGIN {label}-----", f"-----END {label}-----"


def find_pem_block(pem: str, label: str) -> bytes:
    """
    Extract and base64-decode the first PEM section with ``label``.

    Args:
        pem: PEM text
        label: Section label, e.g. "PRIVATE KEY"

    Returns:
        DER bytes of the section body

    Raises:
        BadPemFileError: If the BEGIN or END marker is missing or the body is
            not valid base64
    """
    begin_tag, end_tag = _markers(label)

    begin = pem.find(begin_tag)
    if begin == -1:
        raise BadPemFileError(details={"missing": begin_tag})
    body_start = begin + len(begin_tag)
    end = pem.find(end_tag, body_start)
    if end == -1:
        raise BadPemFileError(details={"missing": end_tag})

    body = "".join(pem[body_start:end].split())
    try:
        return base64.b64decode(body, validate=True)
    except binascii.Error as e:
        raise BadPemFileError(f"invalid base64 in {label} section", cause=e) from e


def encode_pem(der: bytes, label: str) -> str:
    """Wrap DER bytes in a PEM section with 64-character lines."""
    begin_tag, end_tag = _markers(label)
    body = "\n".join(textwrap.wrap(base64.b64encode(der).decode("ascii"), 64))
    return f"{begin_tag}\n{body}\n{end_tag}\n"


def private_key_bytes_from_pem(pem: str, passphrase: Optional[str] = None) -> bytes:
    """
    Read private key bytes from PEM text.

    Without a passphrase the first ``PRIVATE KEY`` section is returned as-is
    (a DER-prefixed seed). With a passphrase the first ``ENCRYPTED PRIVATE KEY``
    section is decrypted and the raw Ed25519 seed is unwrapped from PKCS#8.

    Raises:
        BadPemFileError: If the expected section is missing
        BadKeyError: If the encrypted key cannot be parsed or decrypted, or is
            not an Ed25519 key
    """
    if not passphrase:
        return find_pem_block(pem, PRIVATE_KEY_LABEL)

    der = find_pem_block(pem, ENCRYPTED_PRIVATE_KEY_LABEL)
    try:
        encrypted = EncryptedPrivateKeyInfo.parse(der)
    except BadKeyError as e:
        raise BadKeyError(f"failed to parse encrypted private key: {e.message}", cause=e) from e

    info = encrypted.decrypt(passphrase)
    logger.debug(f"Read encrypted PEM private key with algorithm {info.algorithm}")
    return info.ed25519_seed()


def private_key_to_pem(seed: bytes, passphrase: Optional[str] = None,
                       config: Optional[PemConfig] = None) -> str:
    """
    Write an Ed25519 seed as PKCS#8 PEM, encrypted when a passphrase is given.
    """
    info = PrivateKeyInfo.for_ed25519(seed)
    if not passphrase:
        return encode_pem(info.to_der(), PRIVATE_KEY_LABEL)

    encrypted = EncryptedPrivateKeyInfo.encrypt(info, passphrase, config)
    return encode_pem(encrypted.to_der(), ENCRYPTED_PRIVATE_KEY_LABEL)


__all__ = [
    "PRIVATE_KEY_LABEL",
    "ENCRYPTED_PRIVATE_KEY_LABEL",
    "find_pem_block",
    "encode_pem",
    "private_key_bytes_from_pem",
    "private_key_to_pem",
]
