r"""
Passphrase-protected keystore codec.

A keystore is a UTF-8 JSON document:

    {
        "version": 1,
        "crypto": {
            "ciphertext": hex,
            "cipherparams": {"iv": hex},
            "cipher": "aes-128-ctr",
            "kdf": "pbkdf2",
            "kdfparams": {"dkLen": 32, "salt": hex, "c": 262144, "prf": "hmac-sha256"},
            "mac": hex
        }
    }

The passphrase is stretched with PBKDF2; the first half of the derived key
encrypts the private key with AES-128-CTR and the second half keys an
HMAC-SHA384 over the cipher name, IV and ciphertext. Only the 32-byte seed
is stored, so chain codes do not survive a keystore round trip.
"""

from __future__ import annotations
import json
import logging
import os
from typing import Any, Dict, Optional

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from ..config import DEFAULT_KEYSTORE_CONFIG, MAX_PBKDF2_ITERATIONS, KeystoreConfig
from ..crypto.hash_utils import hmac_digest, hmac_verify, pbkdf2
from ..runtime.errors import BadKeyError, KeyMismatchError

logger = logging.getLogger(__name__)

KEYSTORE_VERSION = 1
CIPHER_AES_128_CTR = "aes-128-ctr"
KDF_PBKDF2 = "pbkdf2"
PRF_HMAC_SHA256 = "hmac-sha256"
MAC_HASH = "sha384"


def _aes_128_ctr(key: bytes, iv: bytes, data: bytes) -> bytes:
    # CTR mode: encryption and decryption are the same operation
    cipher = Cipher(algorithms.AES(key), modes.CTR(iv))
    ctx = cipher.encryptor()
    return ctx.update(data) + ctx.finalize()


def _mac_input(cipher: str, iv: bytes, ciphertext: bytes) -> bytes:
    # cipher name is length-prefixed; IV length is fixed at 16
    name = cipher.encode("utf-8")
    return bytes([len(name)]) + name + iv + ciphertext


def create_keystore(private_key: bytes, passphrase: str,
                    config: Optional[KeystoreConfig] = None) -> bytes:
    """
    Encrypt a private key into a keystore blob.

    Args:
        private_key: Raw private key bytes (the 32-byte seed)
        passphrase: Passphrase protecting the keystore
        config: KDF and cipher sizes; defaults to KeystoreConfig()

    Returns:
        Keystore JSON as UTF-8 bytes
    """
    config = config or DEFAULT_KEYSTORE_CONFIG
    salt = os.urandom(config.salt_length)
    iv = os.urandom(config.iv_length)

    key = pbkdf2("sha256", passphrase, salt, config.iterations, config.dk_len)
    ciphertext = _aes_128_ctr(key[:16], iv, bytes(private_key))
    mac = hmac_digest(MAC_HASH, key[16:], _mac_input(CIPHER_AES_128_CTR, iv, ciphertext))

    keystore = {
        "version": KEYSTORE_VERSION,
        "crypto": {
            "ciphertext": ciphertext.hex(),
            "cipherparams": {"iv": iv.hex()},
            "cipher": CIPHER_AES_128_CTR,
            "kdf": KDF_PBKDF2,
            "kdfparams": {
                "dkLen": config.dk_len,
                "salt": salt.hex(),
                "c": config.iterations,
                "prf": PRF_HMAC_SHA256,
            },
            "mac": mac.hex(),
        },
    }

    logger.debug(f"Created keystore with {config.iterations} PBKDF2 iterations")
    return json.dumps(keystore).encode("utf-8")


def _parse_keystore(blob: bytes) -> Dict[str, Any]:
    try:
        keystore = json.loads(bytes(blob).decode("utf-8"))
        crypto = keystore["crypto"]
        kdfparams = crypto["kdfparams"]
        fields = {
            "version": keystore["version"],
            "cipher": crypto["cipher"],
            "kdf": crypto["kdf"],
            "prf": kdfparams["prf"],
            "dk_len": int(kdfparams["dkLen"]),
            "iterations": int(kdfparams["c"]),
            "salt": bytes.fromhex(kdfparams["salt"]),
            "iv": bytes.fromhex(crypto["cipherparams"]["iv"]),
            "ciphertext": bytes.fromhex(crypto["ciphertext"]),
            "mac": bytes.fromhex(crypto["mac"]),
        }
    except (ValueError, KeyError, TypeError) as e:
        raise BadKeyError(f"malformed keystore: {e}", cause=e) from e

    if fields["version"] != KEYSTORE_VERSION:
        raise BadKeyError(f"unsupported keystore version: {fields['version']}")
    if fields["kdf"] != KDF_PBKDF2:
        raise BadKeyError(f"unsupported key derivation function: {fields['kdf']}")
    if fields["prf"] != PRF_HMAC_SHA256:
        raise BadKeyError(f"unsupported PBKDF2 hash function: {fields['prf']}")
    if fields["cipher"] != CIPHER_AES_128_CTR:
        raise BadKeyError(f"unsupported keystore cipher: {fields['cipher']}")
    if fields["dk_len"] != 32 or not 1 <= fields["iterations"] <= MAX_PBKDF2_ITERATIONS \
            or len(fields["iv"]) != 16:
        raise BadKeyError("invalid keystore parameters",
                          details={"dkLen": fields["dk_len"], "c": fields["iterations"]})
    return fields


def load_keystore(blob: bytes, passphrase: str) -> bytes:
    """
    Decrypt a keystore blob created by create_keystore().

    Args:
        blob: Keystore JSON bytes
        passphrase: Passphrase used to create the keystore

    Returns:
        The stored private key bytes

    Raises:
        BadKeyError: If the blob is not a supported keystore
        KeyMismatchError: If the passphrase is wrong or the blob was altered
    """
    fields = _parse_keystore(blob)

    key = pbkdf2("sha256", passphrase, fields["salt"], fields["iterations"], fields["dk_len"])
    mac_input = _mac_input(fields["cipher"], fields["iv"], fields["ciphertext"])
    if not hmac_verify(MAC_HASH, key[16:], mac_input, fields["mac"]):
        raise KeyMismatchError()

    logger.debug("Keystore MAC verified")
    return _aes_128_ctr(key[:16], fields["iv"], fields["ciphertext"])


__all__ = [
    "KEYSTORE_VERSION",
    "create_keystore",
    "load_keystore",
]
