"""
Token Minter - Minting Policy Instantiation

Binds a PolicyConfiguration to the compiled validator template, producing the
deployable program and its policy id (the hash of the program). The policy id
is the namespace under which the configured token is minted.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Union

from pycardano import PlutusV3Script, plutus_script_hash

from ledger.types import MintDelta, Value

from .config import PolicyConfiguration

logger = logging.getLogger(__name__)


def compute_policy_id(program: bytes) -> bytes:
    """Policy id of a Plutus V3 program: Blake2b-224 over the language-tagged script."""
    return plutus_script_hash(PlutusV3Script(program)).payload


@dataclass(frozen=True)
class MintingPolicyScript:
    """
    A configured minting policy ready for use in transactions.

    Attributes:
        config: Configuration bound into the program
        program: Serialized Plutus V3 program
        policy_id: 28-byte hash of the program
    """
    config: PolicyConfiguration
    program: bytes
    policy_id: bytes

    @classmethod
    def from_cbor(cls, config: PolicyConfiguration, program: bytes) -> "MintingPolicyScript":
        """
        Wrap a program already built for ``config``.

        Args:
            config: Configuration the program was built with
            program: Serialized program

        Returns:
            MintingPolicyScript with its policy id computed from the program
        """
        program = bytes(program)
        return cls(config=config, program=program, policy_id=compute_policy_id(program))

    @classmethod
    def load(cls, config: PolicyConfiguration, path: Union[str, Path]) -> "MintingPolicyScript":
        """Load a program from a file holding its CBOR hex (as written by ``opshin build``)."""
        text = Path(path).read_text().strip()
        return cls.from_cbor(config, bytes.fromhex(text))

    @property
    def policy_id_hex(self) -> str:
        return self.policy_id.hex()

    @property
    def asset_name(self) -> bytes:
        return self.config.token_name

    @property
    def unit(self) -> str:
        """Policy id and token name concatenated, hex encoded."""
        return (self.policy_id + self.config.token_name).hex()

    @property
    def plutus_script(self) -> PlutusV3Script:
        return PlutusV3Script(self.program)

    def mint_delta(self, quantity: int) -> MintDelta:
        return MintDelta(policy_id=self.policy_id, tokens={self.asset_name: quantity})

    def value_of(self, quantity: int) -> Value:
        return Value.asset(self.policy_id, self.asset_name, quantity)

    def to_dict(self) -> Dict[str, str]:
        return {
            "policy_id": self.policy_id_hex,
            "unit": self.unit,
            "program_size": str(len(self.program)),
            **self.config.to_dict(),
        }


def instantiate(template, config: PolicyConfiguration) -> MintingPolicyScript:
    """
    Bind a configuration to the validator template.

    Pure and deterministic: equal configurations and the same template always
    give byte-identical programs and the same policy id.

    Args:
        template: Compiled ValidatorTemplate (anything with ``apply(parameter) -> bytes``)
        config: Policy configuration

    Returns:
        MintingPolicyScript

    Raises:
        PolicyConfigurationError: If the configuration cannot be encoded; raised
            before the template or any hashing is touched
    """
    parameter = config.to_datum()
    program = template.apply(parameter)
    script = MintingPolicyScript.from_cbor(config, program)
    logger.debug(f"Instantiated minting policy {script.policy_id_hex} for {config.token_name_text!r}")
    return script
