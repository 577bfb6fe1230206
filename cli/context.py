"""
Application wiring for the Token Minter CLI.

Builds the wallet, chain data provider, policy instance, transaction builder
and minting service from a MinterConfig. Components are created on first use
and cached, so the validator template is compiled at most once per process.
"""

import logging
from typing import Optional

from pycardano import Network

from crypto.exceptions import CryptoError
from crypto.keys import Wallet
from ledger.types import TxRef
from network.blockfrost import BlockfrostConfig, BlockfrostProvider
from network.emulator import EmulatorProvider
from network.provider import ChainDataProvider
from network.submitter import TransactionSubmitter
from scripts.config import PolicyConfiguration, PolicyConfigurationError
from scripts.policy import MintingPolicyScript, instantiate
from scripts.templates import ValidatorTemplate
from txbuilder.mint import MintTransactionBuilder
from txbuilder.service import MintingService

from .config import ConfigurationError, MinterConfig

logger = logging.getLogger("minter-cli.context")

# Share of the emulator funding placed in a separate UTXO for collateral
EMULATOR_COLLATERAL_LOVELACE = 10_000_000


class AppContext:
    """Lazily constructed application components for one configuration."""

    def __init__(self, config: MinterConfig):
        self.config = config
        self._wallet: Optional[Wallet] = None
        self._provider: Optional[ChainDataProvider] = None
        self._template: Optional[ValidatorTemplate] = None
        self._script: Optional[MintingPolicyScript] = None
        self._service: Optional[MintingService] = None

    @property
    def cardano_network(self) -> Network:
        return Network.MAINNET if self.config.network == "mainnet" else Network.TESTNET

    @property
    def wallet(self) -> Wallet:
        if self._wallet is None:
            phrase = self.config.wallet_mnemonic()
            try:
                if phrase is None:
                    self._wallet = Wallet.generate(self.cardano_network)
                else:
                    self._wallet = Wallet.from_mnemonic(phrase, self.cardano_network)
            except CryptoError as e:
                raise ConfigurationError(f"Cannot load wallet: {e}") from e
            logger.info(f"Wallet address: {self._wallet.address}")
        return self._wallet

    @property
    def provider(self) -> ChainDataProvider:
        if self._provider is None:
            if self.config.network == "emulator":
                emulator = EmulatorProvider()
                address = self.wallet.address
                emulator.fund(address, EMULATOR_COLLATERAL_LOVELACE)
                emulator.fund(address, self.config.emulator_funds)
                self._provider = emulator
            else:
                try:
                    blockfrost_config = BlockfrostConfig(
                        network=self.config.network,
                        project_id=self.config.blockfrost_api_key,
                        base_url=self.config.blockfrost_url,
                        timeout=self.config.timeout,
                    )
                except ValueError as e:
                    raise ConfigurationError(str(e)) from e
                self._provider = BlockfrostProvider(blockfrost_config)
            logger.info(f"Using {self._provider.name} provider for {self.config.network}")
        return self._provider

    @property
    def template(self) -> ValidatorTemplate:
        if self._template is None:
            self._template = ValidatorTemplate.compile()
        return self._template

    @property
    def policy_config(self) -> PolicyConfiguration:
        admin = self.config.admin_key_hash
        admin_identity = bytes.fromhex(admin) if admin else self.wallet.pub_key_hash
        return PolicyConfiguration(admin_identity=admin_identity, token_name=self.config.token_name.encode("utf-8"))

    @property
    def script(self) -> MintingPolicyScript:
        if self._script is None:
            config = self.policy_config
            try:
                if self.config.script_file:
                    self._script = MintingPolicyScript.load(config, self.config.script_file)
                else:
                    self._script = instantiate(self.template, config)
            except PolicyConfigurationError as e:
                raise ConfigurationError(str(e)) from e
            logger.info(f"Policy id: {self._script.policy_id_hex}")
        return self._script

    @property
    def collateral_ref(self) -> Optional[TxRef]:
        if not self.config.collateral:
            return None
        tx_id, _, index = self.config.collateral.partition("#")
        return TxRef(tx_id=tx_id, index=int(index))

    @property
    def service(self) -> MintingService:
        if self._service is None:
            builder = MintTransactionBuilder(
                provider=self.provider,
                wallet=self.wallet,
                script=self.script,
                collateral_ref=self.collateral_ref,
            )
            self._service = MintingService(builder, TransactionSubmitter(self.provider))
        return self._service
