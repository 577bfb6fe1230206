"""
Token Minter - Transaction Submission

This module hands signed transactions to a chain data provider and translates
provider failures into submission errors. Submissions are sent once; a caller
that wants to retry must build a new transaction.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from ledger.types import SignedTransaction

from .exceptions import (
    LedgerRejectedError,
    ProviderConnectionError,
    ProviderError,
    ProviderResponseError,
    SubmissionRejected,
    SubmissionUnreachable,
)
from .provider import ChainDataProvider


class SubmissionStatus(Enum):
    """Outcome of a submission."""
    SUCCESS = "success"
    REJECTED = "rejected"
    UNREACHABLE = "unreachable"


@dataclass
class SubmissionRecord:
    """One submission and its outcome."""
    tx_id: str
    status: SubmissionStatus
    error: Optional[str] = None
    response_time_ms: float = 0.0
    submitted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tx_id": self.tx_id,
            "status": self.status.value,
            "error": self.error,
            "response_time_ms": self.response_time_ms,
            "submitted_at": self.submitted_at.isoformat(),
        }


class TransactionSubmitter:
    """
    Submits signed transactions through a chain data provider.

    Example:
        submitter = TransactionSubmitter(provider)
        tx_id = submitter.submit(signed_tx)
    """

    def __init__(self, provider: ChainDataProvider, history_size: int = 100):
        """
        Initialize transaction submitter.

        Args:
            provider: Chain data provider used for submission
            history_size: Number of submission records kept in memory
        """
        self.provider = provider
        self.history_size = history_size
        self.logger = logging.getLogger(__name__)

        self._history: List[SubmissionRecord] = []
        self._history_lock = threading.Lock()

    def submit(self, signed_tx: SignedTransaction) -> str:
        """
        Submit a signed transaction.

        Args:
            signed_tx: Transaction returned by the construction pipeline

        Returns:
            Transaction id reported by the network

        Raises:
            SubmissionRejected: If the ledger refuses the transaction
            SubmissionUnreachable: If the network cannot be reached or times out
        """
        started = time.time()
        self.logger.info(f"Submitting transaction {signed_tx.tx_id} via {self.provider.name}")

        try:
            tx_id = self.provider.submit(signed_tx)
        except LedgerRejectedError as e:
            self._record(signed_tx.tx_id, SubmissionStatus.REJECTED, started, str(e))
            self.logger.error(f"Transaction {signed_tx.tx_id} rejected: {e}")
            raise SubmissionRejected(str(e), signed_tx.tx_id) from e
        except ProviderConnectionError as e:
            self._record(signed_tx.tx_id, SubmissionStatus.UNREACHABLE, started, str(e))
            self.logger.error(f"Network unreachable while submitting {signed_tx.tx_id}: {e}")
            raise SubmissionUnreachable(str(e)) from e
        except ProviderResponseError as e:
            self._record(signed_tx.tx_id, SubmissionStatus.REJECTED, started, str(e))
            raise SubmissionRejected(e.message, signed_tx.tx_id) from e
        except ProviderError as e:
            self._record(signed_tx.tx_id, SubmissionStatus.REJECTED, started, str(e))
            raise SubmissionRejected(str(e), signed_tx.tx_id) from e

        self._record(tx_id, SubmissionStatus.SUCCESS, started)
        self.logger.info(f"Transaction {tx_id} accepted")
        return tx_id

    def _record(self, tx_id: str, status: SubmissionStatus, started: float, error: Optional[str] = None):
        record = SubmissionRecord(
            tx_id=tx_id,
            status=status,
            error=error,
            response_time_ms=(time.time() - started) * 1000,
        )
        with self._history_lock:
            self._history.append(record)
            del self._history[:-self.history_size]

    def get_history(self) -> List[SubmissionRecord]:
        with self._history_lock:
            return list(self._history)

    def get_statistics(self) -> Dict[str, Any]:
        """Get submission counts by status."""
        with self._history_lock:
            counts = {status.value: 0 for status in SubmissionStatus}
            for record in self._history:
                counts[record.status.value] += 1
            total = len(self._history)

        return {
            "total": total,
            "by_status": counts,
            "success_rate": counts[SubmissionStatus.SUCCESS.value] / total if total else 0.0,
        }
