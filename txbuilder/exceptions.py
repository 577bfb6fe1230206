"""
Transaction Construction Exceptions for Token Minter

Every failure of the mint/burn pipeline is raised as a BuildError subclass.
The original provider or crypto error is chained as ``__cause__``.
"""

from typing import Optional

from validator.core import RejectReason


class BuildError(Exception):
    """Base exception for transaction construction errors."""
    pass


class InvalidMintRequest(BuildError):
    """Raised when the requested quantity is zero or outside the signed 64-bit range."""

    def __init__(self, quantity: object, message: Optional[str] = None):
        self.quantity = quantity
        super().__init__(message or f"Invalid mint quantity: {quantity!r}")


class NoSpendableInputs(BuildError):
    """Raised when the wallet address holds no UTXOs."""

    def __init__(self, address: str):
        self.address = address
        super().__init__(f"No spendable inputs at {address}")


class InvalidCollateral(BuildError):
    """Raised when no UTXO can serve as collateral, or the chosen one is unsuitable."""
    pass


class ScriptRejected(BuildError):
    """
    Raised when the minting policy rejects the transaction during evaluation.

    ``reason`` is the policy's RejectReason when the evaluator reported one.
    """

    def __init__(self, reason: Optional[RejectReason], message: Optional[str] = None):
        self.reason = reason
        label = reason.value if reason else "unknown"
        super().__init__(message or f"Minting policy rejected transaction: {label}")


class BalancingFailed(BuildError):
    """Raised when the provider cannot balance the transaction."""
    pass


class SigningFailed(BuildError):
    """Raised when the wallet cannot sign the balanced transaction."""
    pass


class ProviderUnavailable(BuildError):
    """Raised when the chain data provider is unreachable or times out."""
    pass
