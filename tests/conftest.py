"""
Shared fixtures for the key management tests.
"""
import pytest

from dlt_keys.config import KeystoreConfig, PemConfig

# RFC 8032 section 7.1, test 1
RFC8032_SEED = bytes.fromhex("9d61b19deffd5a60ba844af492ec2cc44449c5697b326919703bac031cae7f60")
RFC8032_PUBLIC = bytes.fromhex("d75a980182b10ab7d54bfed3c964073a0ee172f3daa62325af021a68f707511a")
RFC8032_SIGNATURE = bytes.fromhex(
    "e5564300c360ac729086e2cc806e828a84877f1eb8e5d974d873e065224901555fb8821590a33bacc61e39701cf9b46bd25bf5f0595bbe24655141438e7a100b"
)

MNEMONIC_24 = (
    "inmate flip alley wear offer often piece magnet surge toddler submit right "
    "radio absent pear floor belt raven price stove replace reduce plate home"
)
MNEMONIC_24_KEY = "302e020100300506032b657004220420853f15aecd22706b105da1d709b4ac05b4906170c2b9c7495dff9af49e1391da"


@pytest.fixture
def seed():
    """Deterministic 32-byte Ed25519 seed."""
    return RFC8032_SEED


@pytest.fixture
def private_key(seed):
    """Private key without derivation support."""
    from dlt_keys.crypto.ed25519 import Ed25519PrivateKey
    return Ed25519PrivateKey.from_bytes(seed)


@pytest.fixture
def derivable_key():
    """Private key recovered from a mnemonic, with a chain code."""
    from dlt_keys.crypto.ed25519 import Ed25519PrivateKey
    return Ed25519PrivateKey.from_mnemonic(MNEMONIC_24)


@pytest.fixture
def fast_keystore_config():
    """Keystore parameters with a low PBKDF2 cost for quick tests."""
    return KeystoreConfig(iterations=16)


@pytest.fixture
def fast_pem_config():
    """PEM parameters with a low PBKDF2 cost for quick tests."""
    return PemConfig(iterations=16)


@pytest.fixture
def rfc8032_vector():
    """RFC 8032 test 1 as (seed, public key, signature of the empty message)."""
    return RFC8032_SEED, RFC8032_PUBLIC, RFC8032_SIGNATURE


@pytest.fixture
def mnemonic_phrase():
    return MNEMONIC_24


@pytest.fixture
def mnemonic_key_string():
    """DER-prefixed hex of the key derived from MNEMONIC_24 with no passphrase."""
    return MNEMONIC_24_KEY
