"""
On-chain validator sources, compiled with OpShin.

The modules in this package are OpShin contracts; they are read from disk by
the compiler and are not imported at runtime.
"""

from pathlib import Path

MINTING_POLICY_SOURCE = Path(__file__).parent / "minting_policy.py"

__all__ = ["MINTING_POLICY_SOURCE"]
