"""
Token Minter - Ledger Data Model

This module defines the value types shared by the validator, the transaction
construction pipeline and the chain data providers: multi-asset values, UTXO
entries, outputs, mint deltas, transaction drafts and signed transactions.
"""

import math
from dataclasses import dataclass, field, replace
from typing import Any, Dict, FrozenSet, Iterator, List, Mapping, Optional, Tuple

# Signed 64-bit bounds for mint quantities
MIN_QUANTITY = -(2 ** 63)
MAX_QUANTITY = 2 ** 63 - 1

POLICY_ID_LENGTH = 28
MAX_ASSET_NAME_LENGTH = 32


def _normalize_assets(assets: Mapping[bytes, Mapping[bytes, int]]) -> Dict[bytes, Dict[bytes, int]]:
    """Drop zero quantities and empty policies, order keys canonically."""
    normalized: Dict[bytes, Dict[bytes, int]] = {}
    for policy_id in sorted(assets):
        tokens = {
            name: int(quantity)
            for name, quantity in sorted(assets[policy_id].items())
            if quantity != 0
        }
        if tokens:
            normalized[bytes(policy_id)] = tokens
    return normalized


@dataclass(frozen=True)
class Value:
    """
    Lovelace plus a multi-asset bundle.

    Zero-quantity entries are removed on construction, so two values holding
    the same non-zero quantities always compare equal.
    """
    coin: int = 0
    assets: Dict[bytes, Dict[bytes, int]] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "assets", _normalize_assets(self.assets))

    @classmethod
    def lovelace(cls, amount: int) -> "Value":
        return cls(coin=amount)

    @classmethod
    def asset(cls, policy_id: bytes, asset_name: bytes, quantity: int, coin: int = 0) -> "Value":
        return cls(coin=coin, assets={policy_id: {asset_name: quantity}})

    def __add__(self, other: "Value") -> "Value":
        merged: Dict[bytes, Dict[bytes, int]] = {p: dict(t) for p, t in self.assets.items()}
        for policy_id, tokens in other.assets.items():
            bucket = merged.setdefault(policy_id, {})
            for name, quantity in tokens.items():
                bucket[name] = bucket.get(name, 0) + quantity
        return Value(coin=self.coin + other.coin, assets=merged)

    def __neg__(self) -> "Value":
        return Value(
            coin=-self.coin,
            assets={p: {n: -q for n, q in t.items()} for p, t in self.assets.items()},
        )

    def __sub__(self, other: "Value") -> "Value":
        return self + (-other)

    def quantity_of(self, policy_id: bytes, asset_name: bytes) -> int:
        return self.assets.get(policy_id, {}).get(asset_name, 0)

    def iter_assets(self) -> Iterator[Tuple[bytes, bytes, int]]:
        for policy_id, tokens in self.assets.items():
            for name, quantity in tokens.items():
                yield policy_id, name, quantity

    def is_pure_ada(self) -> bool:
        return not self.assets

    def is_zero(self) -> bool:
        return self.coin == 0 and not self.assets

    def has_negative(self) -> bool:
        return self.coin < 0 or any(q < 0 for _, _, q in self.iter_assets())

    def with_coin(self, coin: int) -> "Value":
        return replace(self, coin=coin)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "lovelace": self.coin,
            "assets": {
                policy_id.hex(): {name.hex(): quantity for name, quantity in tokens.items()}
                for policy_id, tokens in self.assets.items()
            },
        }


def sum_values(values) -> Value:
    total = Value()
    for value in values:
        total = total + value
    return total


@dataclass(frozen=True, order=True)
class TxRef:
    """Reference to a transaction output: (transaction id, output index)."""
    tx_id: str
    index: int

    def __post_init__(self):
        if len(self.tx_id) != 64:
            raise ValueError(f"Invalid transaction ID: {self.tx_id}")
        if self.index < 0:
            raise ValueError(f"Invalid output index: {self.index}")

    def __str__(self) -> str:
        return f"{self.tx_id}#{self.index}"


@dataclass(frozen=True)
class TxOutput:
    """A transaction output: address plus value."""
    address: str
    value: Value


@dataclass(frozen=True)
class UtxoEntry:
    """An unspent output as reported by a chain data provider."""
    reference: TxRef
    value: Value
    address: str

    def to_output(self) -> TxOutput:
        return TxOutput(address=self.address, value=self.value)


@dataclass(frozen=True)
class MintDelta:
    """
    Tokens created (positive) or destroyed (negative) under one policy id
    in a single transaction.
    """
    policy_id: bytes
    tokens: Dict[bytes, int]

    def __post_init__(self):
        if len(self.policy_id) != POLICY_ID_LENGTH:
            raise ValueError(f"Policy id must be {POLICY_ID_LENGTH} bytes, got {len(self.policy_id)}")
        for name, quantity in self.tokens.items():
            if len(name) > MAX_ASSET_NAME_LENGTH:
                raise ValueError(f"Asset name exceeds {MAX_ASSET_NAME_LENGTH} bytes: {name.hex()}")
            if quantity == 0 or not MIN_QUANTITY <= quantity <= MAX_QUANTITY:
                raise ValueError(f"Invalid mint quantity for {name!r}: {quantity}")
        object.__setattr__(self, "tokens", dict(sorted(self.tokens.items())))

    def to_value(self) -> Value:
        return Value(assets={self.policy_id: self.tokens})

    def to_mint_map(self) -> Dict[bytes, Dict[bytes, int]]:
        return {self.policy_id: dict(self.tokens)}


@dataclass(frozen=True)
class ProtocolParams:
    """Subset of the ledger protocol parameters used for fees and limits."""
    min_fee_a: int = 44
    min_fee_b: int = 155381
    coins_per_utxo_byte: int = 4310
    collateral_percent: int = 150
    max_collateral_inputs: int = 3
    max_tx_size: int = 16384
    price_mem: float = 0.0577
    price_step: float = 0.0000721
    max_tx_ex_mem: int = 14_000_000
    max_tx_ex_steps: int = 10_000_000_000

    def execution_fee(self, mem: int, steps: int) -> int:
        return math.ceil(self.price_mem * mem + self.price_step * steps)

    def size_fee(self, size: int) -> int:
        return self.min_fee_a * size + self.min_fee_b

    def required_collateral(self, fee: int) -> int:
        return math.ceil(fee * self.collateral_percent / 100)


@dataclass
class TransactionDraft:
    """
    An in-progress transaction.

    The pipeline mutates a draft while it is being assembled; providers return
    a new, balanced draft from ``complete_and_balance`` with ``fee`` and
    ``tx_id`` populated.
    """
    inputs: List[UtxoEntry] = field(default_factory=list)
    collateral: Optional[UtxoEntry] = None
    outputs: List[TxOutput] = field(default_factory=list)
    mint: Optional[MintDelta] = None
    script: Optional[Any] = None  # scripts.policy.MintingPolicyScript
    redeemer: Optional[Any] = None
    required_signers: FrozenSet[bytes] = frozenset()
    fee: Optional[int] = None
    tx_id: Optional[str] = None
    native: Optional[Any] = None  # provider-specific encoded transaction

    @property
    def is_balanced(self) -> bool:
        return self.fee is not None and self.tx_id is not None

    def input_refs(self) -> List[TxRef]:
        return [utxo.reference for utxo in self.inputs]

    def total_input(self) -> Value:
        return sum_values(utxo.value for utxo in self.inputs)

    def total_output(self) -> Value:
        return sum_values(output.value for output in self.outputs)

    def add_required_signer(self, key_hash: bytes) -> None:
        self.required_signers = frozenset(self.required_signers | {bytes(key_hash)})


@dataclass(frozen=True)
class VKeyWitness:
    """A verification key and its Ed25519 signature over the transaction id."""
    vkey: bytes
    signature: bytes


@dataclass(frozen=True)
class SignedTransaction:
    """A balanced draft plus its witness signatures, ready for submission."""
    draft: TransactionDraft
    witnesses: Tuple[VKeyWitness, ...]

    @property
    def tx_id(self) -> str:
        return self.draft.tx_id
