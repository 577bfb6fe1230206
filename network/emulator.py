"""
Token Minter - In-Memory Ledger Emulator

A deterministic, single-process ledger implementing the chain data provider
interface. It keeps a UTXO set, balances drafts with a linear fee, evaluates
the minting policy through the authorization validator and applies accepted
transactions to its UTXO set. Used by the `emulator` network and by the tests.
"""

import logging
import threading
from dataclasses import replace
from typing import Dict, List, Optional, Union

from pycardano import Address

from crypto.signatures import key_hash, verify_ed25519
from ledger.encoding import blake2b_256, min_lovelace, serialize_body, transaction_id
from ledger.types import (
    ProtocolParams,
    SignedTransaction,
    TransactionDraft,
    TxOutput,
    TxRef,
    UtxoEntry,
    Value,
    sum_values,
)
from validator.core import InternalConsistencyError, MintingPolicyValidator
from validator.view import DraftTransactionView

from .exceptions import (
    BalancingError,
    CollateralError,
    LedgerRejectedError,
    ScriptExecutionError,
)
from .provider import ChainDataProvider

# Execution budget charged for one evaluation of the minting policy
SCRIPT_EX_MEM = 500_000
SCRIPT_EX_STEPS = 200_000_000

# Size allowances for the witness set, which is not part of the body
VKEY_WITNESS_SIZE = 101
REDEEMER_SIZE = 16

MAX_BALANCE_ITERATIONS = 10


class EmulatorProvider(ChainDataProvider):
    """
    In-memory ledger.

    Example:
        emulator = EmulatorProvider()
        emulator.fund(wallet.address, 100_000_000)
        utxos = emulator.find_utxos(wallet.address)
    """

    name = "emulator"

    def __init__(
        self,
        params: Optional[ProtocolParams] = None,
        validator: Optional[MintingPolicyValidator] = None,
    ):
        self.params = params or ProtocolParams()
        self.validator = validator or MintingPolicyValidator()
        self.logger = logging.getLogger(__name__)

        self._utxos: Dict[TxRef, UtxoEntry] = {}
        self._submitted: Dict[str, SignedTransaction] = {}
        self._fund_counter = 0
        self._lock = threading.RLock()

    # Ledger state

    def fund(self, address: str, value: Union[int, Value]) -> UtxoEntry:
        """
        Create an output at an address out of thin air.

        Args:
            address: Receiving address
            value: Lovelace amount or a full Value

        Returns:
            The new UTXO entry
        """
        if isinstance(value, int):
            value = Value.lovelace(value)

        with self._lock:
            self._fund_counter += 1
            seed = f"genesis:{address}:{self._fund_counter}".encode()
            reference = TxRef(tx_id=blake2b_256(seed).hex(), index=0)
            entry = UtxoEntry(reference=reference, value=value, address=address)
            self._utxos[reference] = entry

        self.logger.debug(f"Funded {address} with {value.coin} lovelace at {reference}")
        return entry

    def snapshot(self) -> Dict[TxRef, UtxoEntry]:
        """Copy of the current UTXO set."""
        with self._lock:
            return dict(self._utxos)

    def restore(self, snapshot: Dict[TxRef, UtxoEntry]):
        with self._lock:
            self._utxos = dict(snapshot)

    def balance_of(self, address: str) -> Value:
        return sum_values(entry.value for entry in self.find_utxos(address))

    def is_submitted(self, tx_id: str) -> bool:
        with self._lock:
            return tx_id in self._submitted

    # ChainDataProvider

    def find_utxos(self, address: str) -> List[UtxoEntry]:
        with self._lock:
            entries = [entry for entry in self._utxos.values() if entry.address == address]
        return sorted(entries, key=lambda entry: entry.reference)

    def fetch_protocol_params(self) -> ProtocolParams:
        return self.params

    def complete_and_balance(self, draft: TransactionDraft, change_address: str) -> TransactionDraft:
        """
        Balance a draft against the emulated ledger.

        The attached policy is evaluated first; the fee then converges over a
        few iterations because the change output's size depends on the fee.
        """
        balanced = replace(draft, outputs=list(draft.outputs), inputs=list(draft.inputs))

        with self._lock:
            for ref in balanced.input_refs():
                if ref not in self._utxos:
                    raise BalancingError(f"Input {ref} is not in the UTXO set")

        if not balanced.inputs:
            raise BalancingError("Transaction has no inputs")

        for output in balanced.outputs:
            required = min_lovelace(output, self.params)
            if output.value.coin < required:
                raise BalancingError(
                    f"Output to {output.address} carries {output.value.coin} lovelace, minimum is {required}"
                )

        execution_fee = 0
        if balanced.mint is not None:
            self._evaluate_policy(balanced)
            execution_fee = self.params.execution_fee(SCRIPT_EX_MEM, SCRIPT_EX_STEPS)

        base_outputs = list(balanced.outputs)
        mint_value = balanced.mint.to_value() if balanced.mint is not None else Value()
        fee = 0

        for _ in range(MAX_BALANCE_ITERATIONS):
            spent = sum_values(output.value for output in base_outputs) + Value.lovelace(fee)
            change = balanced.total_input() + mint_value - spent
            if change.has_negative():
                raise BalancingError(f"Insufficient funds: short by {(-change).to_dict()}")

            outputs = list(base_outputs)
            if not change.is_zero():
                change_output = TxOutput(address=change_address, value=change)
                required = min_lovelace(change_output, self.params)
                if change.coin < required:
                    raise BalancingError(
                        f"Insufficient funds for change output: {change.coin} < {required} lovelace"
                    )
                outputs.append(change_output)

            balanced.outputs = outputs
            balanced.fee = fee

            size = self._estimated_size(balanced)
            if size > self.params.max_tx_size:
                raise BalancingError(f"Transaction size {size} exceeds limit {self.params.max_tx_size}")

            required_fee = self.params.size_fee(size) + execution_fee
            if required_fee <= fee:
                break
            fee = required_fee
        else:
            raise BalancingError("Fee did not converge")

        if balanced.mint is not None:
            self._check_collateral(balanced)

        balanced.tx_id = transaction_id(balanced)
        self.logger.debug(f"Balanced transaction {balanced.tx_id} with fee {balanced.fee}")
        return balanced

    def submit(self, signed_tx: SignedTransaction) -> str:
        """
        Validate a signed transaction and apply it to the UTXO set.

        Submitting a transaction that was already applied returns its id
        without changing the ledger.
        """
        draft = signed_tx.draft
        if not draft.is_balanced:
            raise LedgerRejectedError("Transaction is not balanced")

        tx_id = transaction_id(draft)
        if tx_id != draft.tx_id:
            raise LedgerRejectedError(f"Transaction id mismatch: {draft.tx_id} != {tx_id}")

        with self._lock:
            if tx_id in self._submitted:
                self.logger.info(f"Transaction {tx_id} already applied")
                return tx_id

            missing = [ref for ref in draft.input_refs() if ref not in self._utxos]
            if missing:
                raise LedgerRejectedError(
                    f"BadInputsUTxO: inputs already spent or unknown: {', '.join(str(r) for r in missing)}"
                )

            self._check_conservation(draft)
            self._check_witnesses(signed_tx, tx_id)

            if draft.mint is not None:
                try:
                    self._evaluate_policy(draft)
                except ScriptExecutionError as e:
                    raise LedgerRejectedError(f"Script validation failed: {e}") from e
                self._check_collateral(draft)

            for ref in draft.input_refs():
                del self._utxos[ref]
            for index, output in enumerate(draft.outputs):
                reference = TxRef(tx_id=tx_id, index=index)
                self._utxos[reference] = UtxoEntry(reference=reference, value=output.value, address=output.address)
            self._submitted[tx_id] = signed_tx

        self.logger.info(f"Applied transaction {tx_id} ({len(draft.inputs)} inputs, {len(draft.outputs)} outputs)")
        return tx_id

    # Ledger rules

    def _evaluate_policy(self, draft: TransactionDraft):
        script = draft.script
        if script is None:
            raise BalancingError("Transaction mints tokens but carries no minting policy")
        if script.policy_id != draft.mint.policy_id:
            raise BalancingError(
                f"Attached policy {script.policy_id.hex()} does not match minted policy {draft.mint.policy_id.hex()}"
            )

        try:
            outcome = self.validator.validate(script.config, script.policy_id, DraftTransactionView(draft))
        except InternalConsistencyError as e:
            raise ScriptExecutionError(f"Script evaluation failed: {e}") from e

        if not outcome.accepted:
            raise ScriptExecutionError(f"Script evaluation failed: {outcome.reason.trace}", outcome.reason)

    def _check_collateral(self, draft: TransactionDraft):
        collateral = draft.collateral
        if collateral is None:
            raise CollateralError("Script transaction has no collateral input")
        with self._lock:
            if collateral.reference not in self._utxos:
                raise CollateralError(f"Collateral {collateral.reference} is not in the UTXO set")
        if not collateral.value.is_pure_ada():
            raise CollateralError(f"Collateral {collateral.reference} holds native assets")

        required = self.params.required_collateral(draft.fee or 0)
        if collateral.value.coin < required:
            raise CollateralError(
                f"Collateral {collateral.reference} holds {collateral.value.coin} lovelace, {required} required"
            )

    def _check_conservation(self, draft: TransactionDraft):
        produced = draft.total_output() + Value.lovelace(draft.fee)
        consumed = draft.total_input()
        if draft.mint is not None:
            consumed = consumed + draft.mint.to_value()
        if produced != consumed:
            raise LedgerRejectedError(
                f"ValueNotConservedUTxO: consumed {consumed.to_dict()}, produced {produced.to_dict()}"
            )

    def _check_witnesses(self, signed_tx: SignedTransaction, tx_id: str):
        message = bytes.fromhex(tx_id)
        witnessed = set()
        for witness in signed_tx.witnesses:
            if not verify_ed25519(witness.vkey, witness.signature, message):
                raise LedgerRejectedError(f"InvalidWitnessesUTXOW: bad signature for key {witness.vkey.hex()}")
            witnessed.add(key_hash(witness.vkey))

        needed = set(signed_tx.draft.required_signers)
        for entry in signed_tx.draft.inputs:
            needed.add(Address.from_primitive(entry.address).payment_part.payload)

        missing = needed - witnessed
        if missing:
            raise LedgerRejectedError(
                f"MissingVKeyWitnessesUTXOW: {', '.join(sorted(h.hex() for h in missing))}"
            )

    def _estimated_size(self, draft: TransactionDraft) -> int:
        size = len(serialize_body(draft))
        signers = set(draft.required_signers)
        size += VKEY_WITNESS_SIZE * max(len(signers), 1)
        if draft.script is not None:
            size += len(draft.script.program) + REDEEMER_SIZE
        return size
