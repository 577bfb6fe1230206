"""
Token Minter - Cryptographic Operations

Wallet keys and signing, Ed25519 witness verification and key hashing.
"""

from .exceptions import (
    CryptoError,
    InvalidKeyError,
    DerivationError,
    SigningError,
)
from .keys import Wallet, NETWORKS, DERIVATION_PATHS, validate_mnemonic
from .signatures import key_hash, verify_ed25519

__all__ = [
    "CryptoError",
    "InvalidKeyError",
    "DerivationError",
    "SigningError",
    "Wallet",
    "NETWORKS",
    "DERIVATION_PATHS",
    "validate_mnemonic",
    "key_hash",
    "verify_ed25519",
]
