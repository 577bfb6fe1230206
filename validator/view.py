"""
Transaction Views

The validator never reads a concrete transaction type. It reads a
TransactionView: the transaction's mint map and the set of key hashes that
signed it. This module provides the view over a TransactionDraft (what the
ledger presents to the script) and a synthetic builder for tests and tooling.
"""

from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Protocol

from ledger.types import TransactionDraft


class TransactionView(Protocol):
    """Read-only capability exposing only what the minting policy inspects."""

    @property
    def mint(self) -> Mapping[bytes, Mapping[bytes, int]]:
        """Mint/burn map: policy id -> asset name -> signed quantity."""
        ...

    @property
    def signers(self) -> FrozenSet[bytes]:
        """Key hashes asserted by the transaction's signatures."""
        ...


class DraftTransactionView:
    """
    View over a transaction draft.

    Signers are the draft's required signers: the ledger only presents a key
    hash to scripts once its signature has been checked, and a transaction
    cannot be accepted with a required signer missing.
    """

    def __init__(self, draft: TransactionDraft):
        self._draft = draft

    @property
    def mint(self) -> Mapping[bytes, Mapping[bytes, int]]:
        if self._draft.mint is None:
            return {}
        return self._draft.mint.to_mint_map()

    @property
    def signers(self) -> FrozenSet[bytes]:
        return frozenset(self._draft.required_signers)


class SyntheticTransactionView:
    """
    Hand-built transaction view.

    Example:
        view = (SyntheticTransactionView()
                .with_mint(policy_id, b"CO2 Tonne", 1000)
                .signed_by(admin_pkh))
    """

    def __init__(
        self,
        mint: Optional[Mapping[bytes, Mapping[bytes, int]]] = None,
        signers: Iterable[bytes] = (),
    ):
        self._mint: Dict[bytes, Dict[bytes, int]] = {
            policy_id: dict(tokens) for policy_id, tokens in (mint or {}).items()
        }
        self._signers = frozenset(signers)

    @property
    def mint(self) -> Mapping[bytes, Mapping[bytes, int]]:
        return self._mint

    @property
    def signers(self) -> FrozenSet[bytes]:
        return self._signers

    def with_mint(self, policy_id: bytes, asset_name: bytes, quantity: int) -> "SyntheticTransactionView":
        mint = {p: dict(t) for p, t in self._mint.items()}
        mint.setdefault(policy_id, {})[asset_name] = quantity
        return SyntheticTransactionView(mint=mint, signers=self._signers)

    def with_policy(self, policy_id: bytes) -> "SyntheticTransactionView":
        """Add an (empty) mint entry for a policy id."""
        mint = {p: dict(t) for p, t in self._mint.items()}
        mint.setdefault(policy_id, {})
        return SyntheticTransactionView(mint=mint, signers=self._signers)

    def signed_by(self, *key_hashes: bytes) -> "SyntheticTransactionView":
        return SyntheticTransactionView(mint=self._mint, signers=self._signers | set(key_hashes))
