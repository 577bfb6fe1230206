"""
Configuration Management Module for the Token Minter CLI

Settings are merged from, lowest to highest precedence: defaults, a JSON
configuration file, environment variables and command line options. The
merged result is validated as a MinterConfig model.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from ledger.types import MAX_ASSET_NAME_LENGTH

logger = logging.getLogger("minter-cli.config")

NETWORKS = ["mainnet", "preprod", "preview", "yaci", "emulator"]

# Well-known mnemonic funded by the Yaci DevKit local network
YACI_MNEMONIC = (
    "test test test test test test test test test test test test "
    "test test test test test test test test test test test sauce"
)

# Environment variable -> configuration key
ENV_VARS = {
    "MINTER_NETWORK": "network",
    "BLOCKFROST_API_KEY": "blockfrost_api_key",
    "BLOCKFROST_URL": "blockfrost_url",
    "MNEMONIC": "mnemonic",
    "MINTER_TOKEN_NAME": "token_name",
    "MINTER_ADMIN_KEY_HASH": "admin_key_hash",
    "MINTER_SCRIPT_FILE": "script_file",
    "MINTER_COLLATERAL": "collateral",
    "MINTER_TIMEOUT": "timeout",
    "MINTER_HOST": "host",
    "MINTER_PORT": "port",
}


class ConfigurationError(Exception):
    """Raised when the merged configuration is invalid or incomplete."""
    pass


class MinterConfig(BaseModel):
    """Validated process configuration."""

    network: str = Field(default="emulator", description="Target network")
    blockfrost_api_key: Optional[str] = Field(None, description="Blockfrost project id")
    blockfrost_url: Optional[str] = Field(None, description="Override for the Blockfrost base URL")
    mnemonic: Optional[str] = Field(None, description="Wallet mnemonic (24 words)")
    token_name: str = Field(default="CO2 Tonne", min_length=1, description="Token name (UTF-8)")
    admin_key_hash: Optional[str] = Field(None, description="Admin key hash (hex); defaults to the wallet's")
    script_file: Optional[str] = Field(None, description="Prebuilt policy program (CBOR hex)")
    collateral: Optional[str] = Field(None, description="Preferred collateral UTXO as txid#index")
    timeout: int = Field(default=30, gt=0, description="Provider call timeout in seconds")
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8088, gt=0, lt=65536)
    emulator_funds: int = Field(default=1_000_000_000, gt=0, description="Lovelace given to the emulator wallet")

    @field_validator("network")
    @classmethod
    def validate_network(cls, v):
        """Validate network name."""
        if v not in NETWORKS:
            raise ValueError(f"Unknown network {v!r}, expected one of {', '.join(NETWORKS)}")
        return v

    @field_validator("token_name")
    @classmethod
    def validate_token_name(cls, v):
        if len(v.encode("utf-8")) > MAX_ASSET_NAME_LENGTH:
            raise ValueError(f"Token name exceeds {MAX_ASSET_NAME_LENGTH} bytes")
        return v

    @field_validator("admin_key_hash")
    @classmethod
    def validate_admin_key_hash(cls, v):
        if v is None:
            return v
        try:
            raw = bytes.fromhex(v)
        except ValueError:
            raise ValueError("Admin key hash must be hex")
        if len(raw) != 28:
            raise ValueError("Admin key hash must be 28 bytes")
        return v.lower()

    @field_validator("collateral")
    @classmethod
    def validate_collateral(cls, v):
        if v is None:
            return v
        tx_id, sep, index = v.partition("#")
        if not sep or len(tx_id) != 64 or not index.isdigit():
            raise ValueError("Collateral must be given as <txid>#<index>")
        return v

    @property
    def is_local(self) -> bool:
        return self.network in ("yaci", "emulator")

    def wallet_mnemonic(self) -> Optional[str]:
        """
        Mnemonic the wallet is derived from.

        Returns:
            The configured mnemonic, the Yaci DevKit mnemonic on ``yaci``, or
            None on the emulator (a fresh key is generated)

        Raises:
            ConfigurationError: If a public network has no mnemonic
        """
        if self.mnemonic:
            return self.mnemonic
        if self.network == "yaci":
            return YACI_MNEMONIC
        if self.network == "emulator":
            return None
        raise ConfigurationError(f"MNEMONIC must be set for network {self.network}")

    def to_dict(self) -> Dict[str, Any]:
        """Configuration with secrets masked, for display."""
        data = self.model_dump()
        for key in ("blockfrost_api_key", "mnemonic"):
            if data.get(key):
                data[key] = "***"
        return data


def load_config_file(path: Path) -> Dict[str, Any]:
    """
    Load a JSON configuration file.

    Raises:
        ConfigurationError: If the file is missing or not a JSON object
    """
    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}")
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a JSON object")
    logger.debug(f"Loaded configuration from {path}")
    return data


def load_environment(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Collect configuration keys from environment variables."""
    environ = os.environ if environ is None else environ
    return {key: environ[var] for var, key in ENV_VARS.items() if environ.get(var)}


def load_config(
    config_file: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> MinterConfig:
    """
    Merge all configuration sources and validate the result.

    Args:
        config_file: Optional JSON file path
        overrides: Values from command line options (None values are ignored)
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Validated MinterConfig

    Raises:
        ConfigurationError: If a source is unreadable or a value is invalid
    """
    data: Dict[str, Any] = {}
    if config_file:
        data.update(load_config_file(Path(config_file)))
    data.update(load_environment(environ))
    data.update({k: v for k, v in (overrides or {}).items() if v is not None})

    try:
        return MinterConfig(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
