"""
Minting Policy Rules

Concrete rules evaluated by MintingPolicyValidator, in the order the
on-chain program checks them.
"""

from typing import List, Optional

from .core import MintValidationContext, RejectReason, ValidationRule


class SingleTokenRule(ValidationRule):
    """Only one asset name may be minted or burned under the policy."""

    def __init__(self):
        super().__init__(
            name="single_token",
            description="Exactly one asset name under the own policy id",
        )

    def check(self, context: MintValidationContext) -> Optional[RejectReason]:
        if len(context.own_tokens) > 1:
            return RejectReason.MULTIPLE_TOKENS_FOUND
        return None


class TokenNameRule(ValidationRule):
    """The minted or burned asset name must equal the configured token name."""

    def __init__(self):
        super().__init__(
            name="token_name",
            description="Asset name matches the configured token name byte-for-byte",
        )

    def check(self, context: MintValidationContext) -> Optional[RejectReason]:
        (token_name,) = context.own_tokens.keys()
        if bytes(token_name) != context.config.token_name:
            return RejectReason.TOKEN_NAME_MISMATCH
        return None


class AdminSignatureRule(ValidationRule):
    """The administrator must be among the transaction signers."""

    def __init__(self):
        super().__init__(
            name="admin_signature",
            description="Transaction signed by the configured administrator",
        )

    def check(self, context: MintValidationContext) -> Optional[RejectReason]:
        if context.config.admin_identity not in context.signers:
            return RejectReason.MISSING_ADMIN_SIGNATURE
        return None


def default_rules() -> List[ValidationRule]:
    return [SingleTokenRule(), TokenNameRule(), AdminSignatureRule()]
