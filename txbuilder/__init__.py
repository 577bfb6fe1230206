"""
Token Minter - Transaction Construction

Builds, balances and signs mint and burn transactions and hands them to the
submitter.
"""

from .exceptions import (
    BuildError,
    InvalidMintRequest,
    NoSpendableInputs,
    InvalidCollateral,
    ScriptRejected,
    BalancingFailed,
    SigningFailed,
    ProviderUnavailable,
)
from .mint import MintTransactionBuilder
from .service import MintingService

__all__ = [
    "BuildError",
    "InvalidMintRequest",
    "NoSpendableInputs",
    "InvalidCollateral",
    "ScriptRejected",
    "BalancingFailed",
    "SigningFailed",
    "ProviderUnavailable",
    "MintTransactionBuilder",
    "MintingService",
]
