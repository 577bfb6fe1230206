"""
Tests for Ed25519 verification and key hashing.
"""

import pytest
from nacl.signing import SigningKey

from crypto.exceptions import InvalidKeyError
from crypto.signatures import key_hash, verify_ed25519
from ledger.encoding import blake2b_224


@pytest.fixture
def signing_key():
    return SigningKey(b"\x07" * 32)


class TestVerify:
    """Test signature verification."""

    def test_valid_signature(self, signing_key):
        message = b"\x01" * 32
        signature = signing_key.sign(message).signature

        assert verify_ed25519(bytes(signing_key.verify_key), signature, message)

    def test_wrong_message(self, signing_key):
        signature = signing_key.sign(b"\x01" * 32).signature

        assert not verify_ed25519(bytes(signing_key.verify_key), signature, b"\x02" * 32)

    def test_tampered_signature(self, signing_key):
        message = b"\x01" * 32
        signature = bytearray(signing_key.sign(message).signature)
        signature[0] ^= 0xFF

        assert not verify_ed25519(bytes(signing_key.verify_key), bytes(signature), message)

    def test_wrong_key(self, signing_key):
        message = b"\x01" * 32
        signature = signing_key.sign(message).signature
        other = SigningKey(b"\x08" * 32).verify_key

        assert not verify_ed25519(bytes(other), signature, message)

    @pytest.mark.parametrize("vkey_len,sig_len", [(31, 64), (32, 63), (0, 0)])
    def test_bad_lengths(self, vkey_len, sig_len):
        assert not verify_ed25519(b"\x01" * vkey_len, b"\x02" * sig_len, b"message")


class TestKeyHash:
    """Test verification key hashing."""

    def test_blake2b_224(self, signing_key):
        vkey = bytes(signing_key.verify_key)
        assert key_hash(vkey) == blake2b_224(vkey)

    def test_invalid_length(self):
        with pytest.raises(InvalidKeyError):
            key_hash(b"\x01" * 31)


class TestExports:
    """Test the package's public names."""

    def test_exported_names_resolve(self):
        import crypto

        for name in crypto.__all__:
            assert hasattr(crypto, name), name

    def test_bad_signature_is_a_result_not_an_error(self, signing_key):
        import crypto

        assert not hasattr(crypto, "InvalidSignatureError")
        assert verify_ed25519(bytes(signing_key.verify_key), b"\x00" * 64, b"message") is False
