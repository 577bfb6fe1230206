"""
Token Minter Validator Module

This module provides the authorization logic of the minting policy: the pure
validator run against a transaction view, its ordered rules, and the views
that adapt drafts and hand-built transactions to it.
"""

from .view import (
    TransactionView,
    DraftTransactionView,
    SyntheticTransactionView,
)

from .core import (
    MintingPolicyValidator,
    MintValidationContext,
    ValidationRule,
    ValidationResult,
    ValidationOutcome,
    ValidationError,
    InternalConsistencyError,
    RejectReason,
    validate,
)

from .rules import (
    SingleTokenRule,
    TokenNameRule,
    AdminSignatureRule,
    default_rules,
)

__all__ = [
    "TransactionView",
    "DraftTransactionView",
    "SyntheticTransactionView",
    "MintingPolicyValidator",
    "MintValidationContext",
    "ValidationRule",
    "ValidationResult",
    "ValidationOutcome",
    "ValidationError",
    "InternalConsistencyError",
    "RejectReason",
    "validate",
    "SingleTokenRule",
    "TokenNameRule",
    "AdminSignatureRule",
    "default_rules",
]
