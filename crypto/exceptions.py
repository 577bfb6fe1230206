"""
Cryptographic Exceptions for Token Minter

This module defines custom exceptions for key handling and signing.
"""


class CryptoError(Exception):
    """Base exception for all cryptographic errors."""
    pass


class InvalidKeyError(CryptoError):
    """Raised when a key or mnemonic is invalid or malformed."""
    pass


class DerivationError(CryptoError):
    """Raised when key derivation fails."""
    pass


class SigningError(CryptoError):
    """Raised when a transaction cannot be signed."""
    pass
