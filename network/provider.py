"""
Token Minter - Chain Data Provider Interface

The pipeline and the submitter depend on this interface only. Implementations
answer UTXO queries, report protocol parameters, balance drafts and submit
signed transactions.
"""

from abc import ABC, abstractmethod
from typing import List

from ledger.types import ProtocolParams, SignedTransaction, TransactionDraft, UtxoEntry


class ChainDataProvider(ABC):
    """Abstract chain data provider."""

    name: str = "provider"

    @abstractmethod
    def find_utxos(self, address: str) -> List[UtxoEntry]:
        """
        List the unspent outputs at an address.

        Raises:
            ProviderConnectionError: If the provider cannot be reached
        """
        pass

    @abstractmethod
    def fetch_protocol_params(self) -> ProtocolParams:
        """Return the current protocol parameters."""
        pass

    @abstractmethod
    def complete_and_balance(self, draft: TransactionDraft, change_address: str) -> TransactionDraft:
        """
        Add fee and change to a draft, evaluating any attached script.

        Args:
            draft: Assembled draft with inputs, collateral, outputs and mint
            change_address: Address receiving the leftover value

        Returns:
            A new draft with ``fee`` and ``tx_id`` set

        Raises:
            ScriptExecutionError: If the minting policy rejects the draft
            BalancingError: If the draft cannot be balanced
            ProviderConnectionError: If the provider cannot be reached
        """
        pass

    @abstractmethod
    def submit(self, signed_tx: SignedTransaction) -> str:
        """
        Submit a signed transaction.

        Returns:
            Transaction id

        Raises:
            LedgerRejectedError: If the ledger refuses the transaction
            ProviderConnectionError: If the provider cannot be reached
        """
        pass
