"""Test basic imports from the package."""

import pytest


def test_main_import():
    """Test that the main package imports successfully."""
    import dlt_keys
    assert dlt_keys.__version__ == "1.0.0"
    assert hasattr(dlt_keys, 'Ed25519PrivateKey')
    assert hasattr(dlt_keys, 'Ed25519PublicKey')
    assert hasattr(dlt_keys, 'Mnemonic')


def test_crypto_import():
    """Test crypto module imports."""
    import dlt_keys.crypto as crypto
    assert hasattr(crypto, 'derive_child_key')
    assert hasattr(crypto, 'DERIVATION_PATH')


def test_keys_import():
    """Test keys module imports."""
    import dlt_keys.keys as keys
    assert hasattr(keys, 'create_keystore')
    assert hasattr(keys, 'EncryptedPrivateKeyInfo')


def test_codec_import():
    """Test codec module imports."""
    import dlt_keys.codec as codec
    assert hasattr(codec, 'decode_der')
    assert hasattr(codec, 'DerReader')


def test_error_hierarchy():
    """Errors share one base class and distinct codes."""
    from dlt_keys import (BadKeyError, BadPemFileError, DerDecodeError, ErrorCode,
                          KeyManagementError, KeyMismatchError, UnsupportedOperationError)

    errors = [BadKeyError(), DerDecodeError(), BadPemFileError(), KeyMismatchError(),
              UnsupportedOperationError("nope")]
    assert all(isinstance(e, KeyManagementError) for e in errors)
    assert len({e.code for e in errors}) == len(errors)
    assert isinstance(DerDecodeError(), BadKeyError)
    assert DerDecodeError().code == ErrorCode.DER_DECODE
    # every code in the table belongs to an error this package raises
    assert {e.code for e in errors} == set(ErrorCode)


def test_error_to_dict():
    """Errors serialize with their code and cause."""
    from dlt_keys import BadKeyError, ErrorCode

    cause = ValueError("boom")
    err = BadKeyError("bad", details={"length": 3}, cause=cause)
    data = err.to_dict()
    assert data["code"] == ErrorCode.BAD_KEY.value
    assert data["details"] == {"length": 3}
    assert data["cause"] == "boom"
    assert str(err).startswith("[BAD_KEY] bad")
