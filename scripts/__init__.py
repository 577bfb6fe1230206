"""
Token Minter - Minting Policy Scripts

Policy configuration, the compiled validator template, instantiation of
configured policies and the CIP-57 blueprint export.
"""

from .config import PolicyConfiguration, PolicyConfigurationError, MintingConfigDatum
from .policy import MintingPolicyScript, compute_policy_id, instantiate
from .templates import (
    ValidatorTemplate,
    TemplateError,
    TemplateCompilationError,
    ParameterApplicationError,
)
from .blueprint import build_blueprint, blueprint_json

__all__ = [
    "PolicyConfiguration",
    "PolicyConfigurationError",
    "MintingConfigDatum",
    "MintingPolicyScript",
    "compute_policy_id",
    "instantiate",
    "ValidatorTemplate",
    "TemplateError",
    "TemplateCompilationError",
    "ParameterApplicationError",
    "build_blueprint",
    "blueprint_json",
]
