"""
Token Minter - Validator Template

The minting policy is compiled once, without parameters, into a template.
Each deployment then binds its PolicyConfiguration to the template; the
template itself never depends on a configuration.

Compilation uses OpShin.
"""

import hashlib
import logging
from pathlib import Path
from typing import Any, Optional, Union

from opshin import __version__ as opshin_version
from opshin.builder import PlutusContract, apply_parameters, build
from pycardano import PlutusData, PlutusV3Script, plutus_script_hash

from .onchain import MINTING_POLICY_SOURCE

logger = logging.getLogger(__name__)


class TemplateError(Exception):
    """Base exception for validator template errors."""
    pass


class TemplateCompilationError(TemplateError):
    """Raised when the on-chain source fails to compile."""
    pass


class ParameterApplicationError(TemplateError):
    """Raised when a parameter cannot be bound to the template."""
    pass


class ValidatorTemplate:
    """
    A compiled, unparameterized validator program.

    Construct one per process with ``ValidatorTemplate.compile()`` and pass it
    to ``scripts.policy.instantiate``.
    """

    def __init__(self, contract: Any, compiler_version: str, source_hash: Optional[str] = None):
        """
        Args:
            contract: Compiled OpShin contract (``opshin.builder.PlutusContract``)
            compiler_version: Version string of the compiler that produced it
            source_hash: SHA-256 of the on-chain source, for provenance
        """
        self.contract = contract
        self.compiler_version = compiler_version
        self.source_hash = source_hash

    @classmethod
    def compile(cls, source_file: Union[str, Path] = MINTING_POLICY_SOURCE) -> "ValidatorTemplate":
        """
        Compile the on-chain source into a template.

        Args:
            source_file: Path to the OpShin contract

        Returns:
            ValidatorTemplate

        Raises:
            FileNotFoundError: If the source file doesn't exist
            TemplateCompilationError: If compilation fails
        """
        source_path = Path(source_file)
        if not source_path.exists():
            raise FileNotFoundError(f"Contract file not found: {source_path}")

        source_hash = hashlib.sha256(source_path.read_bytes()).hexdigest()
        logger.info(f"Compiling validator template from {source_path}")

        try:
            program = build(str(source_path))
        except Exception as e:
            raise TemplateCompilationError(f"OpShin compilation failed: {e}") from e

        return cls(PlutusContract(program), f"opshin {opshin_version}", source_hash)

    @property
    def cbor(self) -> bytes:
        """Serialized template program."""
        return bytes(self.contract.cbor)

    @property
    def script_hash(self) -> bytes:
        return plutus_script_hash(PlutusV3Script(self.cbor)).payload

    def apply(self, parameter: PlutusData) -> bytes:
        """
        Bind a parameter to the template.

        Args:
            parameter: Plutus data the validator takes as its first argument

        Returns:
            Serialized program with the parameter applied

        Raises:
            ParameterApplicationError: If the parameter cannot be applied
        """
        try:
            applied = apply_parameters(self.contract.contract, parameter)
        except Exception as e:
            raise ParameterApplicationError(f"Failed to apply parameter: {e}") from e
        return bytes(PlutusContract(applied).cbor)
