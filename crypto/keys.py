"""
Key Management and Derivation for Token Minter

This module holds the wallet the pipeline signs with: CIP-1852 key derivation
from a BIP-39 mnemonic, the wallet's address and key hash, and signing of
balanced transaction drafts.

References:
- BIP39: https://github.com/bitcoin/bips/blob/master/bip-0039.mediawiki
- CIP-1852: https://cips.cardano.org/cip/CIP-1852
"""

import logging
from typing import Any, Optional

from mnemonic import Mnemonic
from pycardano import (
    Address,
    HDWallet,
    Network,
    PaymentExtendedSigningKey,
    PaymentSigningKey,
    PaymentVerificationKey,
)

from ledger.types import SignedTransaction, TransactionDraft, VKeyWitness

from .exceptions import DerivationError, InvalidKeyError, SigningError

logger = logging.getLogger(__name__)

# Standard derivation paths
DERIVATION_PATHS = {
    "payment": "m/1852'/1815'/{account}'/0/{index}",
    "stake": "m/1852'/1815'/{account}'/2/0",
}

NETWORKS = {
    "mainnet": Network.MAINNET,
    "testnet": Network.TESTNET,
}


def validate_mnemonic(phrase: str, language: str = "english") -> str:
    """
    Normalize and check a BIP-39 mnemonic.

    Args:
        phrase: Space separated mnemonic words
        language: Wordlist language

    Returns:
        Normalized phrase

    Raises:
        InvalidKeyError: If the checksum or a word is invalid
    """
    words = " ".join(phrase.strip().split())
    if not Mnemonic(language).check(words):
        raise InvalidKeyError("Invalid mnemonic phrase")
    return words


class Wallet:
    """
    A single-address wallet.

    The payment key signs transactions; its hash is both the wallet's payment
    credential and, for the administrator wallet, the policy's admin identity.
    """

    def __init__(
        self,
        verification_key: PaymentVerificationKey,
        signing_key: Optional[Any] = None,
        stake_verification_key: Optional[PaymentVerificationKey] = None,
        network: Network = Network.TESTNET,
    ):
        """
        Args:
            verification_key: Payment verification key (32 bytes)
            signing_key: pycardano signing key; None for a watch-only wallet
            stake_verification_key: Optional stake key for base addresses
            network: Network the address is built for
        """
        self.verification_key = verification_key
        self.signing_key = signing_key
        self.stake_verification_key = stake_verification_key
        self.network = network

    @classmethod
    def from_mnemonic(
        cls,
        phrase: str,
        network: Network = Network.TESTNET,
        account: int = 0,
        index: int = 0,
    ) -> "Wallet":
        """
        Derive the wallet's keys from a mnemonic along CIP-1852 paths.

        Raises:
            InvalidKeyError: If the mnemonic is invalid
            DerivationError: If derivation fails
        """
        words = validate_mnemonic(phrase)
        try:
            root = HDWallet.from_mnemonic(words)
            payment = root.derive_from_path(DERIVATION_PATHS["payment"].format(account=account, index=index))
            stake = root.derive_from_path(DERIVATION_PATHS["stake"].format(account=account))
        except Exception as e:
            raise DerivationError(f"Key derivation failed: {e}") from e

        return cls(
            verification_key=PaymentVerificationKey.from_primitive(payment.public_key),
            signing_key=PaymentExtendedSigningKey.from_hdwallet(payment),
            stake_verification_key=PaymentVerificationKey.from_primitive(stake.public_key),
            network=network,
        )

    @classmethod
    def from_signing_key(cls, signing_key: PaymentSigningKey, network: Network = Network.TESTNET) -> "Wallet":
        return cls(
            verification_key=signing_key.to_verification_key(),
            signing_key=signing_key,
            network=network,
        )

    @classmethod
    def generate(cls, network: Network = Network.TESTNET) -> "Wallet":
        """Create a wallet with a fresh random payment key (emulator and tests)."""
        return cls.from_signing_key(PaymentSigningKey.generate(), network)

    @classmethod
    def watch_only(cls, verification_key: PaymentVerificationKey, network: Network = Network.TESTNET) -> "Wallet":
        return cls(verification_key=verification_key, network=network)

    @property
    def can_sign(self) -> bool:
        return self.signing_key is not None

    @property
    def pub_key_hash(self) -> bytes:
        return self.verification_key.hash().payload

    @property
    def address(self) -> str:
        staking_part = self.stake_verification_key.hash() if self.stake_verification_key else None
        return str(
            Address(
                payment_part=self.verification_key.hash(),
                staking_part=staking_part,
                network=self.network,
            )
        )

    def sign(self, draft: TransactionDraft) -> SignedTransaction:
        """
        Sign a balanced draft.

        Args:
            draft: Draft returned by a provider's complete_and_balance

        Returns:
            SignedTransaction carrying this wallet's witness

        Raises:
            SigningError: If the wallet has no signing key, the draft is not
                balanced or a required signer is not this wallet's key
        """
        if self.signing_key is None:
            raise SigningError("Wallet has no signing key loaded")
        if not draft.is_balanced:
            raise SigningError("Transaction draft must be balanced before signing")

        missing = set(draft.required_signers) - {self.pub_key_hash}
        if missing:
            raise SigningError(
                f"No signing key for required signer(s): {', '.join(sorted(h.hex() for h in missing))}"
            )

        try:
            signature = self.signing_key.sign(bytes.fromhex(draft.tx_id))
        except Exception as e:
            raise SigningError(f"Failed to sign transaction {draft.tx_id}: {e}") from e

        logger.debug(f"Signed transaction {draft.tx_id} with key {self.pub_key_hash.hex()}")
        witness = VKeyWitness(vkey=self.verification_key.payload, signature=signature)
        return SignedTransaction(draft=draft, witnesses=(witness,))

    def __repr__(self) -> str:
        return f"Wallet(address={self.address!r}, can_sign={self.can_sign})"
