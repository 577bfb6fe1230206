"""
Token Minter - Ledger Encoding Utilities

Canonical CBOR encoding of transaction bodies and outputs, following the
field numbering of the Cardano transaction body. Used by the in-memory ledger
to derive transaction ids, estimate sizes and compute minimum output values.
"""

import hashlib
from typing import Any, Dict, List

import cbor2
from pycardano import Address

from .types import ProtocolParams, TransactionDraft, TxOutput, Value

# Constant overhead the ledger adds to every output when sizing min-UTXO
OUTPUT_OVERHEAD_BYTES = 160

# Placeholder coin used while sizing an output whose coin is not known yet
_COIN_PLACEHOLDER = 2 ** 64 - 1

BODY_INPUTS = 0
BODY_OUTPUTS = 1
BODY_FEE = 2
BODY_MINT = 9
BODY_COLLATERAL = 13
BODY_REQUIRED_SIGNERS = 14


def blake2b_224(data: bytes) -> bytes:
    return hashlib.blake2b(data, digest_size=28).digest()


def blake2b_256(data: bytes) -> bytes:
    return hashlib.blake2b(data, digest_size=32).digest()


def encode_address(address: str) -> bytes:
    """Raw address bytes (header byte plus credentials) of a bech32 address."""
    return Address.from_primitive(address).to_primitive()


def encode_value(value: Value) -> Any:
    """Encode a value as a bare coin, or [coin, multiasset] when tokens are present."""
    if value.is_pure_ada():
        return value.coin
    return [value.coin, {policy: dict(tokens) for policy, tokens in value.assets.items()}]


def encode_output(output: TxOutput) -> List[Any]:
    return [encode_address(output.address), encode_value(output.value)]


def encode_body(draft: TransactionDraft) -> Dict[int, Any]:
    """
    Build the canonical body map of a draft.

    Args:
        draft: Transaction draft

    Returns:
        Dictionary keyed by transaction body field numbers
    """
    body: Dict[int, Any] = {
        BODY_INPUTS: [
            [bytes.fromhex(ref.tx_id), ref.index] for ref in sorted(draft.input_refs())
        ],
        BODY_OUTPUTS: [encode_output(output) for output in draft.outputs],
        BODY_FEE: draft.fee or 0,
    }
    if draft.mint is not None:
        body[BODY_MINT] = draft.mint.to_mint_map()
    if draft.collateral is not None:
        ref = draft.collateral.reference
        body[BODY_COLLATERAL] = [[bytes.fromhex(ref.tx_id), ref.index]]
    if draft.required_signers:
        body[BODY_REQUIRED_SIGNERS] = sorted(draft.required_signers)
    return body


def serialize_body(draft: TransactionDraft) -> bytes:
    return cbor2.dumps(encode_body(draft), canonical=True)


def transaction_id(draft: TransactionDraft) -> str:
    """Transaction id: Blake2b-256 of the canonical body encoding, hex."""
    return blake2b_256(serialize_body(draft)).hex()


def output_size(output: TxOutput) -> int:
    return len(cbor2.dumps(encode_output(output), canonical=True))


def min_lovelace(output: TxOutput, params: ProtocolParams) -> int:
    """
    Minimum lovelace an output must carry under the coins-per-UTXO-byte rule.

    The output is sized with a maximal coin so the result stays valid once the
    real coin amount is filled in.
    """
    sized = TxOutput(address=output.address, value=output.value.with_coin(_COIN_PLACEHOLDER))
    return (OUTPUT_OVERHEAD_BYTES + output_size(sized)) * params.coins_per_utxo_byte
