"""
Tests for the ledger data model and its canonical encoding.
"""

import pytest
from pycardano import Address, Network, VerificationKeyHash

from ledger.encoding import OUTPUT_OVERHEAD_BYTES, encode_address, min_lovelace, serialize_body, transaction_id
from ledger.types import (
    MAX_QUANTITY,
    MIN_QUANTITY,
    MintDelta,
    ProtocolParams,
    TransactionDraft,
    TxOutput,
    TxRef,
    UtxoEntry,
    Value,
    sum_values,
)

POLICY = bytes.fromhex("01" * 28)
TOKEN = b"CO2 Tonne"
ADDRESS = str(Address(VerificationKeyHash(b"\x01" * 28), network=Network.TESTNET))


def utxo(index: int = 0, coin: int = 5_000_000) -> UtxoEntry:
    return UtxoEntry(reference=TxRef("cd" * 32, index), value=Value.lovelace(coin), address=ADDRESS)


class TestValue:
    """Test Value arithmetic."""

    def test_zero_entries_dropped(self):
        value = Value(coin=1, assets={POLICY: {TOKEN: 0}})

        assert value.assets == {}
        assert value.is_pure_ada()
        assert value == Value.lovelace(1)

    def test_addition(self):
        total = Value.asset(POLICY, TOKEN, 10, coin=2) + Value.asset(POLICY, TOKEN, 5, coin=3)

        assert total.coin == 5
        assert total.quantity_of(POLICY, TOKEN) == 15

    def test_subtraction_cancels(self):
        value = Value.asset(POLICY, TOKEN, 10, coin=7)

        assert (value - value).is_zero()

    def test_negative_detection(self):
        assert (Value.lovelace(1) - Value.asset(POLICY, TOKEN, 1)).has_negative()
        assert not Value.asset(POLICY, TOKEN, 1, coin=1).has_negative()

    def test_quantity_of_missing(self):
        assert Value.lovelace(1).quantity_of(POLICY, TOKEN) == 0

    def test_sum_values(self):
        assert sum_values([Value.lovelace(1), Value.lovelace(2), Value.lovelace(3)]) == Value.lovelace(6)

    def test_to_dict(self):
        data = Value.asset(POLICY, TOKEN, 3, coin=1).to_dict()

        assert data == {"lovelace": 1, "assets": {POLICY.hex(): {TOKEN.hex(): 3}}}


class TestTxRef:
    """Test transaction references."""

    def test_str(self):
        assert str(TxRef("ab" * 32, 3)) == "ab" * 32 + "#3"

    def test_ordering(self):
        assert TxRef("aa" * 32, 1) < TxRef("aa" * 32, 2) < TxRef("bb" * 32, 0)

    def test_invalid_id(self):
        with pytest.raises(ValueError):
            TxRef("abc", 0)

    def test_negative_index(self):
        with pytest.raises(ValueError):
            TxRef("ab" * 32, -1)


class TestMintDelta:
    """Test mint delta validation."""

    def test_tokens_sorted(self):
        delta = MintDelta(POLICY, {b"b": 1, b"a": -1})
        assert list(delta.tokens) == [b"a", b"b"]

    def test_mint_map(self):
        assert MintDelta(POLICY, {TOKEN: 5}).to_mint_map() == {POLICY: {TOKEN: 5}}

    def test_to_value(self):
        assert MintDelta(POLICY, {TOKEN: -5}).to_value() == Value.asset(POLICY, TOKEN, -5)

    @pytest.mark.parametrize("quantity", [0, MAX_QUANTITY + 1, MIN_QUANTITY - 1])
    def test_invalid_quantity(self, quantity):
        with pytest.raises(ValueError):
            MintDelta(POLICY, {TOKEN: quantity})

    @pytest.mark.parametrize("quantity", [MAX_QUANTITY, MIN_QUANTITY])
    def test_quantity_bounds(self, quantity):
        assert MintDelta(POLICY, {TOKEN: quantity}).tokens[TOKEN] == quantity

    def test_policy_id_length(self):
        with pytest.raises(ValueError):
            MintDelta(b"\x01" * 27, {TOKEN: 1})

    def test_asset_name_length(self):
        with pytest.raises(ValueError):
            MintDelta(POLICY, {b"x" * 33: 1})


class TestProtocolParams:
    """Test fee arithmetic."""

    def test_size_fee(self):
        params = ProtocolParams()
        assert params.size_fee(300) == 44 * 300 + 155381

    def test_execution_fee_rounds_up(self):
        params = ProtocolParams(price_mem=0.5, price_step=0.5)
        assert params.execution_fee(1, 2) == 2

    def test_required_collateral(self):
        assert ProtocolParams().required_collateral(200_001) == 300_002


class TestEncoding:
    """Test body encoding and transaction ids."""

    def test_transaction_id_deterministic(self):
        draft = TransactionDraft(inputs=[utxo()], outputs=[TxOutput(ADDRESS, Value.lovelace(1))], fee=10)

        assert transaction_id(draft) == transaction_id(draft)
        assert len(transaction_id(draft)) == 64

    def test_input_order_irrelevant(self):
        a = TransactionDraft(inputs=[utxo(0), utxo(1)], fee=10)
        b = TransactionDraft(inputs=[utxo(1), utxo(0)], fee=10)

        assert serialize_body(a) == serialize_body(b)

    def test_fee_changes_id(self):
        a = TransactionDraft(inputs=[utxo()], fee=10)
        b = TransactionDraft(inputs=[utxo()], fee=11)

        assert transaction_id(a) != transaction_id(b)

    def test_signers_and_mint_change_id(self):
        base = TransactionDraft(inputs=[utxo()], fee=10)
        minted = TransactionDraft(inputs=[utxo()], fee=10, mint=MintDelta(POLICY, {TOKEN: 1}))
        signed = TransactionDraft(inputs=[utxo()], fee=10, required_signers=frozenset({b"\x01" * 28}))

        assert len({transaction_id(base), transaction_id(minted), transaction_id(signed)}) == 3

    def test_min_lovelace_grows_with_assets(self):
        params = ProtocolParams()
        plain = min_lovelace(TxOutput(ADDRESS, Value.lovelace(0)), params)
        with_token = min_lovelace(TxOutput(ADDRESS, Value.asset(POLICY, TOKEN, 1000)), params)

        assert plain > 0
        assert with_token > plain
        assert plain % params.coins_per_utxo_byte == 0

    def test_min_lovelace_independent_of_coin(self):
        params = ProtocolParams()
        small = min_lovelace(TxOutput(ADDRESS, Value.lovelace(1)), params)
        large = min_lovelace(TxOutput(ADDRESS, Value.lovelace(10 ** 12)), params)

        assert small == large

    def test_address_encoded_as_raw_bytes(self):
        raw = encode_address(ADDRESS)

        assert raw == Address.from_primitive(ADDRESS).to_primitive()
        assert len(raw) == 29

    def test_min_lovelace_sized_by_raw_address(self):
        params = ProtocolParams()

        # Sized as [29-byte address, 9-byte coin]
        assert min_lovelace(TxOutput(ADDRESS, Value.lovelace(0)), params) == (OUTPUT_OVERHEAD_BYTES + 41) * 4310
