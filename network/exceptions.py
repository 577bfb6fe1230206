"""
Network Exceptions for Token Minter

This module defines the errors raised by chain data providers and by the
transaction submitter.
"""

from typing import Optional


class ProviderError(Exception):
    """Base exception for chain data provider errors."""
    pass


class ProviderConnectionError(ProviderError):
    """Raised when the provider cannot be reached."""
    pass


class ProviderTimeoutError(ProviderConnectionError):
    """Raised when a provider call exceeds its timeout."""
    pass


class ProviderResponseError(ProviderError):
    """Raised when the provider answers with an unexpected HTTP status."""

    def __init__(self, status: int, message: str):
        self.status = status
        self.message = message
        super().__init__(f"HTTP {status}: {message}")


class LedgerRejectedError(ProviderError):
    """Raised when the ledger rejects a submitted transaction."""
    pass


class ScriptExecutionError(ProviderError):
    """
    Raised when a script fails during evaluation.

    ``reason`` carries the policy's rejection reason when it can be recovered
    from the evaluation trace, otherwise None.
    """

    def __init__(self, message: str, reason: Optional[object] = None):
        self.reason = reason
        super().__init__(message)


class BalancingError(ProviderError):
    """Raised when a draft cannot be balanced (insufficient funds, size limits, min-UTXO)."""
    pass


class CollateralError(BalancingError):
    """Raised when the collateral input does not cover the required amount."""
    pass


class SubmitError(Exception):
    """Base exception for transaction submission failures."""
    pass


class SubmissionRejected(SubmitError):
    """Raised when the network refuses a transaction."""

    def __init__(self, message: str, tx_id: Optional[str] = None):
        self.message = message
        self.tx_id = tx_id
        super().__init__(message)


class SubmissionUnreachable(SubmitError):
    """Raised when the network cannot be reached or the submission timed out."""
    pass
