"""
Hierarchical derivation tests.

Checks SLIP-0010 ed25519 vectors, the mnemonic root key, hardened-only
child derivation and the derive/derive2 entry points.
"""

import hashlib
import hmac
import os

import pytest

from dlt_keys.crypto.ed25519 import Ed25519PrivateKey
from dlt_keys.crypto.hd import (
    DERIVATION_PATH,
    HARDENED_BIT,
    derive_child_key,
    derive_path,
    master_key_from_seed,
    seed_from_mnemonic,
)
from dlt_keys.keys.mnemonic import Mnemonic
from dlt_keys.runtime.errors import UnsupportedOperationError

# SLIP-0010 test vector 1 for ed25519
SLIP10_SEED = bytes.fromhex("000102030405060708090a0b0c0d0e0f")
SLIP10_CHAIN = [
    # (path, chain code, private key)
    ((), "90046a93de5380a72b5e45010748567d5ea02bbf6522f979e05c0d8d8ca9fffb",
     "2b4be7f19ee27bbf30c667b642d5f4aa69fd169872f8fc3059c08ebae2eb19e7"),
    ((0,), "8b59aa11380b624e81507a27fedda59fea6d0b779a778918a2fd3590e16e9c69",
     "68e0fe46dfb67e368c75379acec591dad19df3cde26e63b93a8e704f1dade7a3"),
    ((0, 1), "a320425f77d1b5c2505a6b1b27382b37368ee640e3557c315416801243552f14",
     "b1d0bad404bf35da785a64ca1ac54b2617211d2777696fbffaf208f746ae84f2"),
]


def _reference_mnemonic_key(phrase, passphrase=""):
    """Straight hashlib/hmac rendition of the mnemonic derivation."""
    seed = hashlib.pbkdf2_hmac("sha512", phrase.encode(), ("mnemonic" + passphrase).encode(), 2048)
    digest = hmac.new(b"ed25519 seed", seed, hashlib.sha512).digest()
    key, chain = digest[:32], digest[32:]
    for index in (44, 3030, 0, 0):
        data = b"\x00" + key + (index | 0x80000000).to_bytes(4, "big")
        digest = hmac.new(chain, data, hashlib.sha512).digest()
        key, chain = digest[:32], digest[32:]
    return key, chain


def _bit_distance(a, b):
    return sum(bin(x ^ y).count("1") for x, y in zip(a, b))


class TestSlip10Vectors:
    """SLIP-0010 ed25519 test vector 1."""

    @pytest.mark.unit
    @pytest.mark.parametrize("path,chain_code,private_key", SLIP10_CHAIN)
    def test_vector(self, path, chain_code, private_key):
        key, chain = master_key_from_seed(SLIP10_SEED)
        key, chain = derive_path(key, chain, path)
        assert key.hex() == private_key
        assert chain.hex() == chain_code


class TestChildDerivation:
    """Test the pure child derivation step."""

    @pytest.mark.unit
    def test_deterministic(self):
        key, chain = os.urandom(32), os.urandom(32)
        assert derive_child_key(key, chain, 7) == derive_child_key(key, chain, 7)

    @pytest.mark.unit
    def test_hardened_bit_forced(self):
        """Index i and i | 0x80000000 give the same child."""
        key, chain = os.urandom(32), os.urandom(32)
        for index in (0, 1, 44, 3030, 0x7FFFFFFF):
            assert derive_child_key(key, chain, index) == derive_child_key(key, chain, index | HARDENED_BIT)

    @pytest.mark.unit
    def test_distinct_indices(self):
        key, chain = os.urandom(32), os.urandom(32)
        children = {derive_child_key(key, chain, index) for index in range(16)}
        assert len(children) == 16

    @pytest.mark.unit
    def test_avalanche(self):
        """Flipping one input bit changes about half of the output bits."""
        key, chain = os.urandom(32), os.urandom(32)
        base = b"".join(derive_child_key(key, chain, 5))

        distances = []
        for i in range(32):
            flipped_key = bytearray(key)
            flipped_key[i] ^= 0x01
            distances.append(_bit_distance(base, b"".join(derive_child_key(bytes(flipped_key), chain, 5))))

            flipped_chain = bytearray(chain)
            flipped_chain[i] ^= 0x80
            distances.append(_bit_distance(base, b"".join(derive_child_key(key, bytes(flipped_chain), 5))))

        distances.append(_bit_distance(base, b"".join(derive_child_key(key, chain, 4))))

        assert all(d > 0 for d in distances)
        mean = sum(distances) / len(distances)
        assert 230 < mean < 282

    @pytest.mark.unit
    @pytest.mark.parametrize("index", [-1, 2 ** 32])
    def test_index_out_of_range(self, index):
        with pytest.raises(ValueError):
            derive_child_key(os.urandom(32), os.urandom(32), index)

    @pytest.mark.unit
    def test_bad_input_sizes(self):
        with pytest.raises(ValueError):
            derive_child_key(os.urandom(31), os.urandom(32), 0)
        with pytest.raises(ValueError):
            derive_child_key(os.urandom(32), os.urandom(33), 0)


class TestMnemonicRoot:
    """Test root key generation from a mnemonic."""

    @pytest.mark.unit
    def test_regression_vector(self, mnemonic_phrase, mnemonic_key_string):
        key = Ed25519PrivateKey.from_mnemonic(mnemonic_phrase)
        assert key.to_string() == mnemonic_key_string
        assert key.supports_derivation

    @pytest.mark.unit
    def test_matches_reference_construction(self, mnemonic_phrase):
        expected_key, expected_chain = _reference_mnemonic_key(mnemonic_phrase)
        key = Ed25519PrivateKey.from_mnemonic(Mnemonic.from_string(mnemonic_phrase))
        assert key.to_bytes() == expected_key
        assert key.chain_code == expected_chain

    @pytest.mark.unit
    def test_passphrase_changes_key(self, mnemonic_phrase):
        expected_key, _ = _reference_mnemonic_key(mnemonic_phrase, "correct horse")
        key = Ed25519PrivateKey.from_mnemonic(mnemonic_phrase, "correct horse")
        assert key.to_bytes() == expected_key
        assert key != Ed25519PrivateKey.from_mnemonic(mnemonic_phrase)

    @pytest.mark.unit
    def test_same_mnemonic_same_key(self, mnemonic_phrase):
        assert Ed25519PrivateKey.from_mnemonic(mnemonic_phrase) == Ed25519PrivateKey.from_mnemonic(mnemonic_phrase)

    @pytest.mark.unit
    def test_seed_from_mnemonic_length(self, mnemonic_phrase):
        assert len(seed_from_mnemonic(mnemonic_phrase.split())) == 64

    @pytest.mark.unit
    def test_default_path(self):
        assert DERIVATION_PATH == (44, 3030, 0, 0)


class TestDeriveEntryPoints:
    """Test derive() and derive2() on key entities."""

    @pytest.mark.unit
    def test_derive_requires_chain_code(self, private_key):
        with pytest.raises(UnsupportedOperationError):
            private_key.derive(0)

    @pytest.mark.unit
    def test_derive_produces_new_derivable_key(self, derivable_key):
        before = derivable_key.to_bytes(), derivable_key.chain_code
        child = derivable_key.derive(0)

        assert child.supports_derivation
        assert child.to_bytes() != derivable_key.to_bytes()
        assert child.chain_code != derivable_key.chain_code
        assert (derivable_key.to_bytes(), derivable_key.chain_code) == before

    @pytest.mark.unit
    def test_derive_matches_engine(self, derivable_key):
        expected = derive_child_key(derivable_key.to_bytes(), derivable_key.chain_code, 3)
        child = derivable_key.derive(3)
        assert (child.to_bytes(), child.chain_code) == expected

    @pytest.mark.unit
    def test_derive_chain(self, derivable_key):
        grandchild = derivable_key.derive(1).derive(2)
        key, chain = derive_path(derivable_key.to_bytes(), derivable_key.chain_code, (1, 2))
        assert grandchild.to_bytes() == key
        assert grandchild.chain_code == chain

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_derive2_matches_derive(self, derivable_key):
        for index in (0, 1, 2 ** 31 - 1):
            child = await derivable_key.derive2(index)
            assert child == derivable_key.derive(index)
            assert child.chain_code == derivable_key.derive(index).chain_code

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_derive2_requires_chain_code(self, private_key):
        with pytest.raises(UnsupportedOperationError):
            await private_key.derive2(0)
