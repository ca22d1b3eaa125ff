"""
PKCS#8 private key structures.

Implements PrivateKeyInfo and EncryptedPrivateKeyInfo (RFC 5208) with the
PBES2 encryption scheme (RFC 8018): PBKDF2 key derivation and AES-CBC.
"""

from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from typing import Optional

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from ..codec.der import DerNode, DerTag, decode_der, encode_der
from ..config import DEFAULT_PEM_CONFIG, MAX_PBKDF2_ITERATIONS, PemConfig
from ..crypto.hash_utils import pbkdf2
from ..runtime.errors import BadKeyError

logger = logging.getLogger(__name__)

OID_ED25519 = "1.3.101.112"
OID_PBES2 = "1.2.840.113549.1.5.13"
OID_PBKDF2 = "1.2.840.113549.1.5.12"

PRF_OIDS = {
    "1.2.840.113549.2.7": "sha1",
    "1.2.840.113549.2.8": "sha224",
    "1.2.840.113549.2.9": "sha256",
    "1.2.840.113549.2.10": "sha384",
    "1.2.840.113549.2.11": "sha512",
}
OID_HMAC_WITH_SHA256 = "1.2.840.113549.2.9"

# OID -> key length in bytes
AES_CBC_OIDS = {
    "2.16.840.1.101.3.4.1.2": 16,
    "2.16.840.1.101.3.4.1.22": 24,
    "2.16.840.1.101.3.4.1.42": 32,
}
OID_AES_256_CBC = "2.16.840.1.101.3.4.1.42"


@dataclass(frozen=True)
class AlgorithmIdentifier:
    """AlgorithmIdentifier ::= SEQUENCE { algorithm OID, parameters ANY OPTIONAL }"""

    algorithm: str
    parameters: Optional[DerNode] = None

    @classmethod
    def from_der(cls, node: DerNode) -> AlgorithmIdentifier:
        children = node.as_sequence(min_len=1)
        parameters = children[1] if len(children) > 1 else None
        return cls(children[0].as_oid(), parameters)

    def to_der(self) -> DerNode:
        if self.parameters is None:
            return DerNode.sequence(DerNode.oid(self.algorithm))
        return DerNode.sequence(DerNode.oid(self.algorithm), self.parameters)

    def __str__(self) -> str:
        return self.algorithm


@dataclass(frozen=True)
class Pbkdf2Params:
    """PBKDF2-params with the PRF resolved to a hash name."""

    salt: bytes
    iterations: int
    key_length: Optional[int] = None
    prf: str = "sha1"

    @classmethod
    def from_der(cls, node: DerNode) -> Pbkdf2Params:
        children = node.as_sequence(min_len=2)
        salt = children[0].as_bytes()
        iterations = children[1].as_int()
        key_length = None
        prf = "sha1"

        rest = list(children[2:])
        if rest and rest[0].tag == DerTag.INTEGER:
            key_length = rest.pop(0).as_int()
        if rest:
            prf_oid = AlgorithmIdentifier.from_der(rest[0]).algorithm
            if prf_oid not in PRF_OIDS:
                raise BadKeyError(f"unsupported PBKDF2 PRF {prf_oid}")
            prf = PRF_OIDS[prf_oid]

        if not 1 <= iterations <= MAX_PBKDF2_ITERATIONS:
            raise BadKeyError(f"invalid PBKDF2 iteration count {iterations}")
        return cls(salt, iterations, key_length, prf)

    def to_der(self) -> DerNode:
        prf_oid = next(oid for oid, name in PRF_OIDS.items() if name == self.prf)
        children = [DerNode.octet_string(self.salt), DerNode.integer(self.iterations)]
        if self.key_length is not None:
            children.append(DerNode.integer(self.key_length))
        children.append(DerNode.sequence(DerNode.oid(prf_oid), DerNode.null()))
        return DerNode.sequence(*children)


@dataclass(frozen=True)
class PrivateKeyInfo:
    """PrivateKeyInfo ::= SEQUENCE { version, privateKeyAlgorithm, privateKey OCTET STRING }"""

    version: int
    algorithm: AlgorithmIdentifier
    private_key: bytes

    @classmethod
    def parse(cls, data: bytes) -> PrivateKeyInfo:
        children = decode_der(data).as_sequence(min_len=3)
        return cls(
            version=children[0].as_int(),
            algorithm=AlgorithmIdentifier.from_der(children[1]),
            private_key=children[2].as_bytes(),
        )

    @classmethod
    def for_ed25519(cls, seed: bytes) -> PrivateKeyInfo:
        # CurvePrivateKey ::= OCTET STRING, nested inside privateKey
        inner = encode_der(DerNode.octet_string(seed))
        return cls(0, AlgorithmIdentifier(OID_ED25519), inner)

    def to_der(self) -> bytes:
        return encode_der(DerNode.sequence(
            DerNode.integer(self.version),
            self.algorithm.to_der(),
            DerNode.octet_string(self.private_key),
        ))

    def ed25519_seed(self) -> bytes:
        """
        Unwrap the raw Ed25519 private key.

        Raises:
            BadKeyError: If the algorithm is not Ed25519 or the key is malformed
        """
        if self.algorithm.algorithm != OID_ED25519:
            raise BadKeyError(f"unknown private key algorithm {self.algorithm}")
        return decode_der(self.private_key).as_bytes()


@dataclass(frozen=True)
class EncryptedPrivateKeyInfo:
    """EncryptedPrivateKeyInfo ::= SEQUENCE { encryptionAlgorithm, encryptedData OCTET STRING }"""

    algorithm: AlgorithmIdentifier
    encrypted_data: bytes

    @classmethod
    def parse(cls, data: bytes) -> EncryptedPrivateKeyInfo:
        children = decode_der(data).as_sequence(min_len=2)
        return cls(
            algorithm=AlgorithmIdentifier.from_der(children[0]),
            encrypted_data=children[1].as_bytes(),
        )

    def to_der(self) -> bytes:
        return encode_der(DerNode.sequence(
            self.algorithm.to_der(),
            DerNode.octet_string(self.encrypted_data),
        ))

    def _pbes2_params(self):
        if self.algorithm.algorithm != OID_PBES2:
            raise BadKeyError(f"unsupported encryption scheme {self.algorithm}")
        if self.algorithm.parameters is None:
            raise BadKeyError("missing PBES2 parameters")

        kdf_node, scheme_node = self.algorithm.parameters.as_sequence(min_len=2)[:2]
        kdf = AlgorithmIdentifier.from_der(kdf_node)
        if kdf.algorithm != OID_PBKDF2 or kdf.parameters is None:
            raise BadKeyError(f"unsupported key derivation function {kdf}")
        scheme = AlgorithmIdentifier.from_der(scheme_node)
        if scheme.algorithm not in AES_CBC_OIDS or scheme.parameters is None:
            raise BadKeyError(f"unsupported cipher {scheme}")

        params = Pbkdf2Params.from_der(kdf.parameters)
        iv = scheme.parameters.as_bytes()
        key_length = AES_CBC_OIDS[scheme.algorithm]
        if params.key_length is not None and params.key_length != key_length:
            raise BadKeyError(f"key length {params.key_length} does not match cipher {scheme}")
        if len(iv) != 16:
            raise BadKeyError(f"invalid AES-CBC IV length {len(iv)}")
        return params, iv, key_length

    def decrypt(self, passphrase: str) -> PrivateKeyInfo:
        """
        Decrypt with a passphrase and parse the inner PrivateKeyInfo.

        Raises:
            BadKeyError: If the scheme is unsupported, the passphrase is wrong
                or the decrypted structure is malformed
        """
        params, iv, key_length = self._pbes2_params()
        key = pbkdf2(params.prf, passphrase, params.salt, params.iterations, key_length)

        decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
        unpadder = padding.PKCS7(128).unpadder()
        try:
            padded = decryptor.update(self.encrypted_data) + decryptor.finalize()
            plaintext = unpadder.update(padded) + unpadder.finalize()
        except ValueError as e:
            raise BadKeyError("failed to decrypt private key; wrong passphrase?", cause=e) from e

        logger.debug(f"Decrypted PKCS#8 key ({params.prf}, {params.iterations} iterations)")
        return PrivateKeyInfo.parse(plaintext)

    @classmethod
    def encrypt(cls, info: PrivateKeyInfo, passphrase: str,
                config: Optional[PemConfig] = None) -> EncryptedPrivateKeyInfo:
        """Encrypt ``info`` with PBES2 (PBKDF2-HMAC-SHA256, AES-256-CBC)."""
        config = config or DEFAULT_PEM_CONFIG
        params = Pbkdf2Params(os.urandom(config.salt_length), config.iterations, prf="sha256")
        iv = os.urandom(16)
        key = pbkdf2(params.prf, passphrase, params.salt, params.iterations, AES_CBC_OIDS[OID_AES_256_CBC])

        padder = padding.PKCS7(128).padder()
        padded = padder.update(info.to_der()) + padder.finalize()
        encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()

        scheme = AlgorithmIdentifier(OID_PBES2, DerNode.sequence(
            AlgorithmIdentifier(OID_PBKDF2, params.to_der()).to_der(),
            AlgorithmIdentifier(OID_AES_256_CBC, DerNode.octet_string(iv)).to_der(),
        ))
        return cls(scheme, ciphertext)


__all__ = [
    "OID_ED25519",
    "AlgorithmIdentifier",
    "Pbkdf2Params",
    "PrivateKeyInfo",
    "EncryptedPrivateKeyInfo",
]
