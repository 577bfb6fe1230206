"""
Ed25519 Signature Operations for Token Minter

Verification of transaction witnesses and key hashing. Signing itself is done
by the pycardano signing keys held in crypto.keys.Wallet.
"""

from nacl.exceptions import BadSignatureError, CryptoError as NaclCryptoError
from nacl.signing import VerifyKey
from pycardano import PaymentVerificationKey

from .exceptions import InvalidKeyError

ED25519_PUBLIC_KEY_LENGTH = 32
ED25519_SIGNATURE_LENGTH = 64


def key_hash(vkey: bytes) -> bytes:
    """
    Compute the 28-byte key hash of an Ed25519 verification key.

    Args:
        vkey: 32-byte verification key

    Returns:
        Blake2b-224 digest of the key

    Raises:
        InvalidKeyError: If the key has the wrong length
    """
    if len(vkey) != ED25519_PUBLIC_KEY_LENGTH:
        raise InvalidKeyError(f"Verification key must be {ED25519_PUBLIC_KEY_LENGTH} bytes, got {len(vkey)}")
    return PaymentVerificationKey(vkey).hash().payload


def verify_ed25519(vkey: bytes, signature: bytes, message: bytes) -> bool:
    """
    Verify an Ed25519 signature.

    Args:
        vkey: 32-byte verification key
        signature: 64-byte signature
        message: Signed message

    Returns:
        True if the signature is valid
    """
    if len(vkey) != ED25519_PUBLIC_KEY_LENGTH or len(signature) != ED25519_SIGNATURE_LENGTH:
        return False
    try:
        VerifyKey(vkey).verify(message, signature)
        return True
    except (BadSignatureError, NaclCryptoError):
        return False
