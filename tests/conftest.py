"""
Pytest configuration and fixtures for Token Minter tests.
"""

import pytest
from unittest.mock import Mock

from crypto.keys import Wallet
from network.emulator import EmulatorProvider
from network.submitter import TransactionSubmitter
from scripts.config import PolicyConfiguration
from scripts.policy import MintingPolicyScript
from txbuilder.mint import MintTransactionBuilder
from txbuilder.service import MintingService

TOKEN_NAME = b"CO2 Tonne"

# Stand-in for a compiled template: the applied program is this prefix
# followed by the encoded parameter, so each configuration gets its own id
TEMPLATE_PREFIX = bytes.fromhex("5901d0010000323232323232")

COLLATERAL_LOVELACE = 10_000_000
FUNDING_LOVELACE = 1_000_000_000


def apply_to_template(parameter) -> bytes:
    return TEMPLATE_PREFIX + parameter.to_cbor()


def make_script(config: PolicyConfiguration) -> MintingPolicyScript:
    return MintingPolicyScript.from_cbor(config, apply_to_template(config.to_datum()))


@pytest.fixture
def fake_template():
    """Template double exposing the same surface as ValidatorTemplate."""
    template = Mock()
    template.apply.side_effect = apply_to_template
    template.cbor = TEMPLATE_PREFIX
    template.script_hash = bytes(range(28))
    template.compiler_version = "opshin 0.24.0"
    return template


@pytest.fixture
def admin_wallet():
    return Wallet.generate()


@pytest.fixture
def other_wallet():
    return Wallet.generate()


@pytest.fixture
def policy_config(admin_wallet):
    return PolicyConfiguration(admin_identity=admin_wallet.pub_key_hash, token_name=TOKEN_NAME)


@pytest.fixture
def policy_script(policy_config):
    return make_script(policy_config)


@pytest.fixture
def emulator():
    return EmulatorProvider()


@pytest.fixture
def funded_emulator(emulator, admin_wallet):
    """Emulator holding a collateral-sized UTXO and a larger spending UTXO for the admin."""
    emulator.fund(admin_wallet.address, COLLATERAL_LOVELACE)
    emulator.fund(admin_wallet.address, FUNDING_LOVELACE)
    return emulator


@pytest.fixture
def builder(funded_emulator, admin_wallet, policy_script):
    return MintTransactionBuilder(funded_emulator, admin_wallet, policy_script)


@pytest.fixture
def service(builder, funded_emulator):
    return MintingService(builder, TransactionSubmitter(funded_emulator))
