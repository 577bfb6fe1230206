"""
Token Minter - Mint/Burn Transaction Builder

This module assembles, balances and signs transactions that mint or burn the
configured token under a minting policy instance.

Pipeline:
1. Input discovery: all UTXOs at the wallet address
2. Selection: the smallest eligible pure-ADA UTXO is set aside as collateral and
   every other UTXO is spent (the collateral itself only when nothing else exists)
3. Script attachment: program, unit redeemer, mint delta, admin as required signer
4. Outputs: a mint sends the new tokens back to the wallet; a burn adds none
5. Balancing: fee and change computed by the chain data provider
6. Signing: the wallet witnesses the balanced transaction

Any failure aborts the build; nothing is retried.
"""

import logging
from typing import List, Optional

from pycardano import Unit

from crypto.exceptions import CryptoError
from crypto.keys import Wallet
from ledger.encoding import min_lovelace
from ledger.types import (
    MAX_QUANTITY,
    MIN_QUANTITY,
    SignedTransaction,
    TransactionDraft,
    TxOutput,
    TxRef,
    UtxoEntry,
)
from network.exceptions import (
    BalancingError,
    CollateralError,
    ProviderConnectionError,
    ProviderError,
    ScriptExecutionError,
)
from network.provider import ChainDataProvider
from scripts.policy import MintingPolicyScript

from .exceptions import (
    BalancingFailed,
    InvalidCollateral,
    InvalidMintRequest,
    NoSpendableInputs,
    ProviderUnavailable,
    ScriptRejected,
    SigningFailed,
)


class MintTransactionBuilder:
    """
    Builds signed mint and burn transactions for one policy instance and wallet.

    The builder holds no state between builds and reserves no UTXOs, so two
    concurrent builds for the same wallet may select the same inputs.
    """

    # Smallest pure-ADA UTXO accepted as collateral
    MIN_COLLATERAL_LOVELACE = 5_000_000

    def __init__(
        self,
        provider: ChainDataProvider,
        wallet: Wallet,
        script: MintingPolicyScript,
        collateral_ref: Optional[TxRef] = None,
        min_collateral: int = MIN_COLLATERAL_LOVELACE,
    ):
        """
        Initialize mint transaction builder.

        Args:
            provider: Chain data provider for UTXOs, balancing and parameters
            wallet: Wallet that funds, receives and signs
            script: Configured minting policy instance
            collateral_ref: Preferred collateral UTXO, if any
            min_collateral: Collateral floor in lovelace
        """
        self.provider = provider
        self.wallet = wallet
        self.script = script
        self.collateral_ref = collateral_ref
        self.min_collateral = min_collateral
        self.logger = logging.getLogger(__name__)

    def build_mint_tx(self, quantity: int) -> SignedTransaction:
        """
        Build a transaction minting ``quantity`` units to the wallet.

        Args:
            quantity: Number of units to create (positive)

        Returns:
            Signed transaction ready for submission

        Raises:
            BuildError: Subclass describing the failed step
        """
        self._check_quantity(quantity)
        if quantity < 0:
            raise InvalidMintRequest(quantity, f"Mint quantity must be positive, got {quantity}")
        return self.build(quantity)

    def build_burn_tx(self, quantity: int) -> SignedTransaction:
        """
        Build a transaction burning ``abs(quantity)`` units held by the wallet.

        The sign of ``quantity`` is ignored: a burn always destroys units.
        """
        self._check_quantity(quantity)
        return self.build(-abs(quantity))

    def build(self, delta: int) -> SignedTransaction:
        """
        Run the pipeline for a signed mint delta.

        Args:
            delta: Units to create (positive) or destroy (negative)

        Returns:
            Signed transaction
        """
        self._check_quantity(delta)
        action = "mint" if delta > 0 else "burn"
        self.logger.info(f"Building {action} of {abs(delta)} {self.script.config.token_name_text!r}")

        utxos = self._discover_inputs()
        collateral = self._select_collateral(utxos)
        draft = TransactionDraft(inputs=self._select_inputs(utxos, collateral))
        draft.collateral = collateral
        self._attach_script(draft, delta)

        if delta > 0:
            self._add_mint_output(draft, delta)

        balanced = self._balance(draft)
        signed = self._sign(balanced)
        self.logger.info(f"Built {action} transaction {signed.tx_id} (fee {balanced.fee})")
        return signed

    def _check_quantity(self, quantity: int):
        if not isinstance(quantity, int) or isinstance(quantity, bool):
            raise InvalidMintRequest(quantity, f"Quantity must be an integer, got {type(quantity).__name__}")
        if quantity == 0:
            raise InvalidMintRequest(quantity, "Quantity must be non-zero")
        if not MIN_QUANTITY <= quantity <= MAX_QUANTITY:
            raise InvalidMintRequest(quantity, f"Quantity {quantity} is outside the signed 64-bit range")

    def _discover_inputs(self) -> List[UtxoEntry]:
        address = self.wallet.address
        try:
            utxos = self.provider.find_utxos(address)
        except ProviderError as e:
            raise ProviderUnavailable(f"Cannot list UTXOs at {address}: {e}") from e

        if not utxos:
            raise NoSpendableInputs(address)

        self.logger.debug(f"Discovered {len(utxos)} UTXOs at {address}")
        return utxos

    def _is_eligible_collateral(self, utxo: UtxoEntry) -> bool:
        return utxo.value.is_pure_ada() and utxo.value.coin >= self.min_collateral

    def _select_collateral(self, utxos: List[UtxoEntry]) -> UtxoEntry:
        if self.collateral_ref is not None:
            for utxo in utxos:
                if utxo.reference == self.collateral_ref:
                    if not self._is_eligible_collateral(utxo):
                        raise InvalidCollateral(
                            f"Collateral {self.collateral_ref} must hold at least "
                            f"{self.min_collateral} lovelace and no tokens"
                        )
                    return utxo
            raise InvalidCollateral(f"Collateral {self.collateral_ref} is not a UTXO of this wallet")

        eligible = [utxo for utxo in utxos if self._is_eligible_collateral(utxo)]
        if not eligible:
            raise InvalidCollateral(
                f"No pure-ADA UTXO with at least {self.min_collateral} lovelace available for collateral"
            )

        collateral = min(eligible, key=lambda utxo: utxo.value.coin)
        self.logger.debug(f"Selected collateral {collateral.reference}")
        return collateral

    def _select_inputs(self, utxos: List[UtxoEntry], collateral: UtxoEntry) -> List[UtxoEntry]:
        # Collateral stays unspent unless it is the only UTXO
        inputs = [utxo for utxo in utxos if utxo.reference != collateral.reference]
        return inputs or [collateral]

    def _attach_script(self, draft: TransactionDraft, delta: int):
        draft.script = self.script
        draft.redeemer = Unit()
        draft.mint = self.script.mint_delta(delta)
        draft.add_required_signer(self.script.config.admin_identity)

    def _add_mint_output(self, draft: TransactionDraft, quantity: int):
        try:
            params = self.provider.fetch_protocol_params()
        except ProviderConnectionError as e:
            raise ProviderUnavailable(f"Cannot fetch protocol parameters: {e}") from e
        except ProviderError as e:
            raise BalancingFailed(f"Cannot fetch protocol parameters: {e}") from e

        output = TxOutput(address=self.wallet.address, value=self.script.value_of(quantity))
        coin = min_lovelace(output, params)
        draft.outputs.append(TxOutput(address=output.address, value=output.value.with_coin(coin)))

    def _balance(self, draft: TransactionDraft) -> TransactionDraft:
        try:
            return self.provider.complete_and_balance(draft, self.wallet.address)
        except ScriptExecutionError as e:
            raise ScriptRejected(e.reason, str(e)) from e
        except CollateralError as e:
            raise InvalidCollateral(str(e)) from e
        except BalancingError as e:
            raise BalancingFailed(str(e)) from e
        except ProviderConnectionError as e:
            raise ProviderUnavailable(f"Provider unavailable while balancing: {e}") from e
        except ProviderError as e:
            raise BalancingFailed(str(e)) from e

    def _sign(self, draft: TransactionDraft) -> SignedTransaction:
        try:
            return self.wallet.sign(draft)
        except CryptoError as e:
            raise SigningFailed(str(e)) from e
