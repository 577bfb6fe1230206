"""
Token Minter - Ledger Model

Value types describing UTXOs, transaction drafts and signed transactions,
plus the canonical encoding used to derive transaction ids.
"""

from .types import (
    MAX_ASSET_NAME_LENGTH,
    MAX_QUANTITY,
    MIN_QUANTITY,
    POLICY_ID_LENGTH,
    MintDelta,
    ProtocolParams,
    SignedTransaction,
    TransactionDraft,
    TxOutput,
    TxRef,
    UtxoEntry,
    Value,
    VKeyWitness,
    sum_values,
)
from .encoding import min_lovelace, serialize_body, transaction_id

__all__ = [
    "MAX_ASSET_NAME_LENGTH",
    "MAX_QUANTITY",
    "MIN_QUANTITY",
    "POLICY_ID_LENGTH",
    "MintDelta",
    "ProtocolParams",
    "SignedTransaction",
    "TransactionDraft",
    "TxOutput",
    "TxRef",
    "UtxoEntry",
    "Value",
    "VKeyWitness",
    "sum_values",
    "min_lovelace",
    "serialize_body",
    "transaction_id",
]
