"""
Token Minter - Authorization Validator Core

This module provides the pure decision function the ledger's script engine
mirrors when it evaluates the minting policy: given the policy configuration,
the policy's own id and a view of the proposed transaction, it accepts the
transaction or returns the reason it is rejected.

The validator coordinates an ordered list of rules:
- exactly one asset name is minted or burned under the own policy id
- that asset name equals the configured token name
- the configured administrator is among the transaction signers

The first failing rule decides the rejection. Situations the ledger
guarantees can never happen (no entry for the own policy id, an empty entry)
raise InternalConsistencyError instead of producing a rejection.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Mapping, Optional

from scripts.config import PolicyConfiguration

from .view import TransactionView


class ValidationResult(Enum):
    """Validation result codes."""
    APPROVED = "approved"
    REJECTED = "rejected"


class RejectReason(Enum):
    """Policy rejections, with the trace message the on-chain program emits."""
    MULTIPLE_TOKENS_FOUND = "MultipleTokensFound"
    TOKEN_NAME_MISMATCH = "TokenNameMismatch"
    MISSING_ADMIN_SIGNATURE = "MissingAdminSignature"

    @property
    def trace(self) -> str:
        return _TRACE_MESSAGES[self]

    @classmethod
    def from_trace(cls, message: str) -> Optional["RejectReason"]:
        """
        Map a script evaluation failure message back to a rejection reason.

        Args:
            message: Error text reported by a script evaluator

        Returns:
            The matching RejectReason, or None if the message is not a policy trace
        """
        for reason, trace in _TRACE_MESSAGES.items():
            if trace in message or reason.value in message:
                return reason
        return None


_TRACE_MESSAGES: Dict[RejectReason, str] = {
    RejectReason.MULTIPLE_TOKENS_FOUND: "Multiple tokens found",
    RejectReason.TOKEN_NAME_MISMATCH: "Token name not found",
    RejectReason.MISSING_ADMIN_SIGNATURE: "Not signed by admin",
}


class ValidationError(Exception):
    """Base exception for validation errors."""
    pass


class InternalConsistencyError(ValidationError):
    """
    Raised when the ledger/engine contract is broken.

    This is never a policy rejection: it means the validator was invoked for a
    transaction the ledger should not have presented to it.
    """
    pass


@dataclass(frozen=True)
class ValidationOutcome:
    """Verdict of one validator invocation."""
    result: ValidationResult
    reason: Optional[RejectReason] = None

    @property
    def accepted(self) -> bool:
        return self.result == ValidationResult.APPROVED

    @classmethod
    def accept(cls) -> "ValidationOutcome":
        return cls(ValidationResult.APPROVED)

    @classmethod
    def reject(cls, reason: RejectReason) -> "ValidationOutcome":
        return cls(ValidationResult.REJECTED, reason)

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "result": self.result.value,
            "reason": self.reason.value if self.reason else None,
        }


@dataclass(frozen=True)
class MintValidationContext:
    """
    Inputs shared by the validation rules.

    ``own_tokens`` is the mint map entry for the policy's own id, resolved
    once by the validator before any rule runs.
    """
    config: PolicyConfiguration
    own_policy_id: bytes
    own_tokens: Mapping[bytes, int]
    signers: frozenset


class ValidationRule(ABC):
    """
    Abstract base class for validation rules.

    Each rule checks one aspect of a mint or burn and returns the rejection
    reason, or None when the check passes.
    """

    def __init__(self, name: str, description: str):
        self.name = name
        self.description = description

    @abstractmethod
    def check(self, context: MintValidationContext) -> Optional[RejectReason]:
        """
        Check the transaction context.

        Args:
            context: Validation context

        Returns:
            RejectReason if the rule is violated, None otherwise
        """
        pass


class MintingPolicyValidator:
    """
    Runs the policy rules in order against a transaction view.

    Stateless apart from its rule list; the same inputs always yield the same
    outcome.
    """

    def __init__(self, rules: Optional[List[ValidationRule]] = None):
        if rules is None:
            from .rules import default_rules
            rules = default_rules()
        self.rules = list(rules)
        self.logger = logging.getLogger("validator.policy")

    def validate(
        self,
        config: PolicyConfiguration,
        own_policy_id: bytes,
        tx_view: TransactionView,
    ) -> ValidationOutcome:
        """
        Decide whether a transaction may mint or burn under this policy.

        Args:
            config: Policy configuration bound into the script
            own_policy_id: Policy id of the script instance being evaluated
            tx_view: Mint map and signer set of the proposed transaction

        Returns:
            ValidationOutcome (accepted, or rejected with a reason)

        Raises:
            InternalConsistencyError: If the mint map has no entries for the own policy id
        """
        mint = tx_view.mint
        if own_policy_id not in mint:
            raise InternalConsistencyError(
                f"Tokens not found: policy {own_policy_id.hex()} is not minting or burning"
            )

        own_tokens = mint[own_policy_id]
        if len(own_tokens) == 0:
            raise InternalConsistencyError(
                f"Impossible: no tokens found under policy {own_policy_id.hex()}"
            )

        context = MintValidationContext(
            config=config,
            own_policy_id=own_policy_id,
            own_tokens=own_tokens,
            signers=frozenset(tx_view.signers),
        )

        for rule in self.rules:
            reason = rule.check(context)
            if reason is not None:
                self.logger.debug(f"Rule {rule.name} rejected transaction: {reason.value}")
                return ValidationOutcome.reject(reason)

        return ValidationOutcome.accept()


def validate(
    config: PolicyConfiguration,
    own_policy_id: bytes,
    tx_view: TransactionView,
) -> ValidationOutcome:
    """
    Validate a mint/burn transaction with the default rule set.

    Args:
        config: Policy configuration
        own_policy_id: Policy id of the evaluated script instance
        tx_view: View of the proposed transaction

    Returns:
        ValidationOutcome
    """
    return MintingPolicyValidator().validate(config, own_policy_id, tx_view)
