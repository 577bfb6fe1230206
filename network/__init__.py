"""
Token Minter - Network Layer

Chain data providers (Blockfrost HTTP API and an in-memory ledger emulator)
and transaction submission.
"""

from .exceptions import (
    ProviderError,
    ProviderConnectionError,
    ProviderTimeoutError,
    ProviderResponseError,
    LedgerRejectedError,
    ScriptExecutionError,
    BalancingError,
    CollateralError,
    SubmitError,
    SubmissionRejected,
    SubmissionUnreachable,
)
from .provider import ChainDataProvider
from .emulator import EmulatorProvider
from .blockfrost import BlockfrostConfig, BlockfrostProvider, NETWORK_URLS
from .submitter import TransactionSubmitter, SubmissionRecord, SubmissionStatus

__all__ = [
    "ProviderError",
    "ProviderConnectionError",
    "ProviderTimeoutError",
    "ProviderResponseError",
    "LedgerRejectedError",
    "ScriptExecutionError",
    "BalancingError",
    "CollateralError",
    "SubmitError",
    "SubmissionRejected",
    "SubmissionUnreachable",
    "ChainDataProvider",
    "EmulatorProvider",
    "BlockfrostConfig",
    "BlockfrostProvider",
    "NETWORK_URLS",
    "TransactionSubmitter",
    "SubmissionRecord",
    "SubmissionStatus",
]
