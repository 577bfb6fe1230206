"""
Admin-controlled minting policy for a single token name.

Parameterized with a MintingConfig at deployment time, so every
(admin, token name) pair yields its own policy id.

Compile: opshin build minting_policy.py
"""
from opshin.prelude import *


@dataclass()
class MintingConfig(PlutusData):
    CONSTR_ID = 0
    admin_pub_key_hash: PubKeyHash
    token_name: TokenName


def validator(config: MintingConfig, context: ScriptContext) -> None:
    purpose = context.purpose
    assert isinstance(purpose, Minting), "Only for minting"

    # fails when the ledger invokes us for a policy that mints nothing
    own_tokens = context.transaction.mint[purpose.policy_id]
    assert len(own_tokens) > 0, "Impossible: no tokens found"
    assert len(own_tokens) == 1, "Multiple tokens found"
    for token_name in own_tokens.keys():
        assert token_name == config.token_name, "Token name not found"

    assert (
        config.admin_pub_key_hash in context.transaction.signatories
    ), "Not signed by admin"
