"""
Token Minter - Minting Policy Configuration

The configuration baked into every deployment of the minting policy: the
administrator allowed to authorize mints and burns, and the single token name
the policy accepts. Changing either value changes the policy id.
"""

from dataclasses import dataclass

from pycardano import PlutusData

from ledger.types import MAX_ASSET_NAME_LENGTH

PUB_KEY_HASH_LENGTH = 28


class PolicyConfigurationError(ValueError):
    """Raised when a configuration cannot be encoded as a script parameter."""
    pass


@dataclass
class MintingConfigDatum(PlutusData):
    """Plutus data encoding of the configuration, as read by the on-chain validator."""
    CONSTR_ID = 0
    admin_pub_key_hash: bytes
    token_name: bytes


@dataclass(frozen=True)
class PolicyConfiguration:
    """
    Immutable pairing of an administrator identity and the allowed token name.

    Attributes:
        admin_identity: 28-byte public key hash of the administrator
        token_name: Raw bytes of the only asset name the policy accepts
    """
    admin_identity: bytes
    token_name: bytes

    def __post_init__(self):
        object.__setattr__(self, "admin_identity", bytes(self.admin_identity))
        object.__setattr__(self, "token_name", bytes(self.token_name))

    @classmethod
    def from_text(cls, admin_identity_hex: str, token_name: str) -> "PolicyConfiguration":
        """
        Build a configuration from a hex key hash and a UTF-8 token name.

        Raises:
            PolicyConfigurationError: If the key hash is not valid hex
        """
        try:
            admin = bytes.fromhex(admin_identity_hex)
        except ValueError as e:
            raise PolicyConfigurationError(f"Admin key hash is not hex: {admin_identity_hex!r}") from e
        return cls(admin_identity=admin, token_name=token_name.encode("utf-8"))

    def check(self) -> None:
        """
        Verify the configuration fits the ledger limits.

        Raises:
            PolicyConfigurationError: If a field is out of range
        """
        if len(self.admin_identity) != PUB_KEY_HASH_LENGTH:
            raise PolicyConfigurationError(
                f"Admin identity must be a {PUB_KEY_HASH_LENGTH}-byte key hash, "
                f"got {len(self.admin_identity)} bytes"
            )
        if len(self.token_name) > MAX_ASSET_NAME_LENGTH:
            raise PolicyConfigurationError(
                f"Token name exceeds {MAX_ASSET_NAME_LENGTH} bytes: {len(self.token_name)}"
            )

    def to_datum(self) -> MintingConfigDatum:
        """Encode as the validator's parameter, checking ledger limits first."""
        self.check()
        return MintingConfigDatum(
            admin_pub_key_hash=self.admin_identity,
            token_name=self.token_name,
        )

    def to_cbor(self) -> bytes:
        return self.to_datum().to_cbor()

    @property
    def token_name_text(self) -> str:
        return self.token_name.decode("utf-8", errors="replace")

    def to_dict(self) -> dict:
        return {
            "admin_identity": self.admin_identity.hex(),
            "token_name": self.token_name_text,
            "token_name_hex": self.token_name.hex(),
        }
