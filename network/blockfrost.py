"""
Token Minter - Blockfrost Chain Data Provider

This module provides the chain data provider for public Cardano networks and
the local Yaci DevKit, talking to the Blockfrost HTTP API (or a compatible
endpoint) with connection pooling, retries on idempotent queries and bounded
timeouts. Balancing and script cost evaluation are delegated to pycardano's
TransactionBuilder.
"""

import logging
import os
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, List, Optional

import requests
from blockfrost import ApiError, BlockFrostApi
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from pycardano import (
    Address,
    BlockFrostChainContext,
    InsufficientUTxOBalanceException,
    MultiAsset,
    Network,
    PaymentVerificationKey,
    Redeemer,
    Transaction,
    TransactionBuilder,
    TransactionFailedException,
    TransactionId,
    TransactionInput,
    TransactionOutput,
    Unit,
    UTxO,
    UTxOSelectionException,
    Value as CardanoValue,
    VerificationKeyHash,
    VerificationKeyWitness,
)

from ledger.types import (
    POLICY_ID_LENGTH,
    ProtocolParams,
    SignedTransaction,
    TransactionDraft,
    TxOutput,
    TxRef,
    UtxoEntry,
    Value,
)
from validator.core import RejectReason

from .exceptions import (
    BalancingError,
    LedgerRejectedError,
    ProviderConnectionError,
    ProviderError,
    ProviderResponseError,
    ProviderTimeoutError,
    ScriptExecutionError,
)
from .provider import ChainDataProvider

NETWORK_URLS = {
    "mainnet": "https://cardano-mainnet.blockfrost.io/api/v0",
    "preprod": "https://cardano-preprod.blockfrost.io/api/v0",
    "preview": "https://cardano-preview.blockfrost.io/api/v0",
    "yaci": "http://localhost:8080/api/v1",
}

# Networks reachable without a Blockfrost project id
KEYLESS_NETWORKS = {"yaci"}


@dataclass
class BlockfrostConfig:
    """Configuration for a Blockfrost (or compatible) endpoint."""
    network: str = "preview"
    project_id: Optional[str] = None
    base_url: Optional[str] = None
    timeout: int = 30
    max_retries: int = 3
    backoff_factor: float = 1.0
    page_size: int = 100

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.network not in NETWORK_URLS:
            raise ValueError(f"Unknown network: {self.network}. Expected one of {sorted(NETWORK_URLS)}")

        if not self.base_url:
            self.base_url = NETWORK_URLS[self.network]
        self.base_url = self.base_url.rstrip("/")

        if not self.project_id and self.network not in KEYLESS_NETWORKS:
            raise ValueError(f"A Blockfrost project id is required for network {self.network}")

    @classmethod
    def from_env(cls, network: Optional[str] = None) -> "BlockfrostConfig":
        """Create config from environment variables."""
        return cls(
            network=network or os.getenv("MINTER_NETWORK", "preview"),
            project_id=os.getenv("BLOCKFROST_API_KEY"),
            base_url=os.getenv("BLOCKFROST_URL"),
            timeout=int(os.getenv("MINTER_TIMEOUT", "30")),
            max_retries=int(os.getenv("BLOCKFROST_MAX_RETRIES", "3")),
        )

    @property
    def cardano_network(self) -> Network:
        return Network.MAINNET if self.network == "mainnet" else Network.TESTNET

    @property
    def context_url(self) -> str:
        """Base URL without the API version segment, as pycardano's chain context expects."""
        return self.base_url.rsplit("/", 1)[0]

    @property
    def api_version(self) -> str:
        """Trailing version segment of the base URL (``v0`` for Blockfrost, ``v1`` for Yaci)."""
        return self.base_url.rsplit("/", 1)[1]


class VersionedChainContext(BlockFrostChainContext):
    """
    BlockFrostChainContext pinned to an explicit API version.

    The parent builds its ``BlockFrostApi`` without a version, so the client
    falls back to ``v0`` and queries the latest epoch before returning. The
    version is applied as soon as the API object is assigned, which keeps that
    first query on the configured endpoint as well.
    """

    def __init__(self, project_id: str, base_url: str, api_version: str):
        self._api_version = api_version
        super().__init__(project_id=project_id, base_url=base_url)

    @property
    def api(self) -> BlockFrostApi:
        return self._api

    @api.setter
    def api(self, api: BlockFrostApi):
        api.api_version = self._api_version
        self._api = api


def parse_amount(amount: List[Dict[str, str]]) -> Value:
    """
    Parse a Blockfrost amount list into a Value.

    Units other than ``lovelace`` are the policy id hex followed by the asset
    name hex.
    """
    coin = 0
    assets: Dict[bytes, Dict[bytes, int]] = {}
    for item in amount:
        unit = item["unit"]
        quantity = int(item["quantity"])
        if unit == "lovelace":
            coin += quantity
            continue
        raw = bytes.fromhex(unit)
        policy_id, asset_name = raw[:POLICY_ID_LENGTH], raw[POLICY_ID_LENGTH:]
        bucket = assets.setdefault(policy_id, {})
        bucket[asset_name] = bucket.get(asset_name, 0) + quantity
    return Value(coin=coin, assets=assets)


def to_cardano_value(value: Value) -> CardanoValue:
    if value.is_pure_ada():
        return CardanoValue(value.coin)
    return CardanoValue(value.coin, MultiAsset.from_primitive(value.assets))


def from_cardano_value(value: CardanoValue) -> Value:
    assets: Dict[bytes, Dict[bytes, int]] = {}
    for script_hash, asset in value.multi_asset.items():
        assets[script_hash.payload] = {name.payload: quantity for name, quantity in asset.items()}
    return Value(coin=value.coin, assets=assets)


def to_cardano_utxo(entry: UtxoEntry) -> UTxO:
    reference = TransactionInput(TransactionId(bytes.fromhex(entry.reference.tx_id)), entry.reference.index)
    output = TransactionOutput(Address.from_primitive(entry.address), to_cardano_value(entry.value))
    return UTxO(reference, output)


class BlockfrostProvider(ChainDataProvider):
    """
    Chain data provider backed by the Blockfrost HTTP API.

    Example:
        provider = BlockfrostProvider(BlockfrostConfig.from_env())
        utxos = provider.find_utxos(wallet.address)
    """

    name = "blockfrost"

    def __init__(
        self,
        config: Optional[BlockfrostConfig] = None,
        context_factory: Optional[Callable[[BlockfrostConfig], Any]] = None,
    ):
        """
        Initialize the provider.

        Args:
            config: Endpoint configuration (uses environment if None)
            context_factory: Builds the pycardano chain context used for balancing
        """
        self.config = config or BlockfrostConfig.from_env()
        self.logger = logging.getLogger(__name__)
        self._context_factory = context_factory or self._default_context
        self._context = None

        self.session = requests.Session()

        # Only idempotent queries are retried; submissions are sent once
        retry_strategy = Retry(
            total=self.config.max_retries,
            backoff_factor=self.config.backoff_factor,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET"],
        )
        adapter = HTTPAdapter(max_retries=retry_strategy, pool_maxsize=10)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

        self.session.headers.update({"User-Agent": "token-minter/1.0"})
        if self.config.project_id:
            self.session.headers.update({"project_id": self.config.project_id})

    @staticmethod
    def _default_context(config: BlockfrostConfig):
        return VersionedChainContext(
            project_id=config.project_id or "",
            base_url=config.context_url,
            api_version=config.api_version,
        )

    @property
    def context(self):
        if self._context is None:
            self._context = self._context_factory(self.config)
        return self._context

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self.config.base_url}{path}"
        try:
            return self.session.request(method, url, timeout=self.config.timeout, **kwargs)
        except requests.exceptions.Timeout as e:
            raise ProviderTimeoutError(f"{method} {path} timed out after {self.config.timeout}s") from e
        except requests.exceptions.ConnectionError as e:
            raise ProviderConnectionError(f"Connection error: {e}") from e
        except requests.exceptions.RequestException as e:
            raise ProviderConnectionError(f"Request failed: {e}") from e

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        response = self._request("GET", path, params=params)
        if response.status_code != 200:
            raise ProviderResponseError(response.status_code, _error_message(response))
        return response.json()

    def find_utxos(self, address: str) -> List[UtxoEntry]:
        """
        List the UTXOs at an address, following pagination.

        An address the chain has never seen is reported as 404, which is
        returned as an empty list.
        """
        entries: List[UtxoEntry] = []
        page = 1
        while True:
            try:
                items = self._get(
                    f"/addresses/{address}/utxos",
                    params={"page": page, "count": self.config.page_size, "order": "asc"},
                )
            except ProviderResponseError as e:
                if e.status == 404:
                    break
                raise

            for item in items:
                entries.append(
                    UtxoEntry(
                        reference=TxRef(tx_id=item["tx_hash"], index=int(item["output_index"])),
                        value=parse_amount(item["amount"]),
                        address=item.get("address", address),
                    )
                )

            if len(items) < self.config.page_size:
                break
            page += 1

        self.logger.debug(f"Found {len(entries)} UTXOs at {address}")
        return entries

    def fetch_protocol_params(self) -> ProtocolParams:
        data = self._get("/epochs/latest/parameters")
        return ProtocolParams(
            min_fee_a=int(data["min_fee_a"]),
            min_fee_b=int(data["min_fee_b"]),
            coins_per_utxo_byte=int(data.get("coins_per_utxo_size") or data.get("coins_per_utxo_word")),
            collateral_percent=int(data["collateral_percent"]),
            max_collateral_inputs=int(data["max_collateral_inputs"]),
            max_tx_size=int(data["max_tx_size"]),
            price_mem=float(data["price_mem"]),
            price_step=float(data["price_step"]),
            max_tx_ex_mem=int(data["max_tx_ex_mem"]),
            max_tx_ex_steps=int(data["max_tx_ex_steps"]),
        )

    def complete_and_balance(self, draft: TransactionDraft, change_address: str) -> TransactionDraft:
        """
        Balance a draft with pycardano's TransactionBuilder.

        The builder evaluates the attached script through the chain context to
        price its execution units, so a policy rejection surfaces here. HTTP
        errors from the chain context are mapped by status: rate limiting and
        server errors mean the endpoint is unavailable, anything else is a
        balancing failure.
        """
        try:
            builder = TransactionBuilder(self.context)
        except ApiError as e:
            raise _context_error(e) from e
        except requests.exceptions.RequestException as e:
            raise ProviderConnectionError(f"Chain context unreachable: {e}") from e

        for entry in draft.inputs:
            builder.add_input(to_cardano_utxo(entry))
        if draft.collateral is not None:
            builder.collaterals.append(to_cardano_utxo(draft.collateral))

        if draft.mint is not None:
            builder.add_minting_script(draft.script.plutus_script, redeemer=Redeemer(Unit()))
            builder.mint = MultiAsset.from_primitive(draft.mint.to_mint_map())
        if draft.required_signers:
            builder.required_signers = [VerificationKeyHash(h) for h in sorted(draft.required_signers)]

        for output in draft.outputs:
            builder.add_output(
                TransactionOutput(Address.from_primitive(output.address), to_cardano_value(output.value))
            )

        try:
            body = builder.build(change_address=Address.from_primitive(change_address))
            witness_set = builder.build_witness_set()
        except TransactionFailedException as e:
            reason = RejectReason.from_trace(str(e))
            if reason is not None:
                raise ScriptExecutionError(f"Script evaluation failed: {e}", reason) from e
            raise BalancingError(f"Transaction evaluation failed: {e}") from e
        except (InsufficientUTxOBalanceException, UTxOSelectionException) as e:
            raise BalancingError(f"Insufficient funds: {e}") from e
        except ApiError as e:
            raise _context_error(e) from e
        except requests.exceptions.RequestException as e:
            raise ProviderConnectionError(f"Chain context unreachable: {e}") from e

        balanced = replace(
            draft,
            outputs=[
                TxOutput(address=str(output.address), value=from_cardano_value(output.amount))
                for output in body.outputs
            ],
            fee=body.fee,
            tx_id=body.id.payload.hex(),
            native=(body, witness_set),
        )
        self.logger.debug(f"Balanced transaction {balanced.tx_id} with fee {balanced.fee}")
        return balanced

    def submit(self, signed_tx: SignedTransaction) -> str:
        """
        Submit a signed transaction as CBOR to ``/tx/submit``.

        Raises:
            LedgerRejectedError: If the node refuses the transaction
            ProviderConnectionError: If the endpoint cannot be reached
        """
        native = signed_tx.draft.native
        if native is None:
            raise ProviderError("Transaction was not balanced by a Blockfrost provider")

        body, witness_set = native
        witness_set.vkey_witnesses = [
            VerificationKeyWitness(PaymentVerificationKey(w.vkey), w.signature) for w in signed_tx.witnesses
        ]
        payload = Transaction(body, witness_set).to_cbor()

        response = self._request("POST", "/tx/submit", data=payload, headers={"Content-Type": "application/cbor"})
        if response.status_code == 400:
            raise LedgerRejectedError(_error_message(response))
        if response.status_code != 200:
            raise ProviderResponseError(response.status_code, _error_message(response))

        tx_id = response.json()
        self.logger.info(f"Submitted transaction {tx_id}")
        return tx_id

    def close(self):
        """Close the HTTP session."""
        self.session.close()


def _context_error(error: ApiError) -> ProviderError:
    detail = error.message or error.error or str(error)
    if error.status_code == 429 or error.status_code >= 500:
        return ProviderConnectionError(f"Chain context unavailable ({error.status_code}): {detail}")
    return BalancingError(f"Chain context rejected request ({error.status_code}): {detail}")


def _error_message(response: requests.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text or response.reason or ""
    if isinstance(data, dict):
        return str(data.get("message") or data.get("error") or data)
    return str(data)
