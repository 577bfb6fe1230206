"""
Token Minter - Minting Service

Ties the transaction builder to the submitter: one call builds, signs and
submits a mint or burn and returns the transaction id.
"""

import logging
import threading
from typing import Any, Dict

from network.submitter import TransactionSubmitter

from .mint import MintTransactionBuilder

logger = logging.getLogger(__name__)


class MintingService:
    """
    Builds and submits mint and burn transactions for one wallet.

    Requests are serialized with a lock: the builder reserves no UTXOs, so two
    concurrent requests for the same wallet would otherwise spend the same
    inputs and one of them would be rejected by the ledger.
    """

    def __init__(self, builder: MintTransactionBuilder, submitter: TransactionSubmitter):
        self.builder = builder
        self.submitter = submitter
        self._lock = threading.Lock()

    @property
    def script(self):
        return self.builder.script

    def submit_minting_tx(self, amount: int) -> str:
        """
        Mint ``amount`` units to the wallet.

        Returns:
            Transaction id

        Raises:
            BuildError: If the transaction cannot be built
            SubmitError: If the network refuses or cannot be reached
        """
        with self._lock:
            signed = self.builder.build_mint_tx(amount)
            tx_id = self.submitter.submit(signed)
        logger.info(f"Minted {amount} {self.script.config.token_name_text!r} in {tx_id}")
        return tx_id

    def submit_burning_tx(self, amount: int) -> str:
        """Burn ``abs(amount)`` units held by the wallet and return the transaction id."""
        with self._lock:
            signed = self.builder.build_burn_tx(amount)
            tx_id = self.submitter.submit(signed)
        logger.info(f"Burned {abs(amount)} {self.script.config.token_name_text!r} in {tx_id}")
        return tx_id

    def holdings(self) -> int:
        """Units of the token currently held at the wallet address."""
        script = self.script
        total = 0
        for utxo in self.builder.provider.find_utxos(self.builder.wallet.address):
            total += utxo.value.quantity_of(script.policy_id, script.asset_name)
        return total

    def policy_info(self) -> Dict[str, Any]:
        info: Dict[str, Any] = dict(self.script.to_dict())
        info["address"] = self.builder.wallet.address
        info["network"] = self.builder.provider.name
        return info
