"""Dry-run submission without network calls."""

import hashlib
import json
import logging
from typing import Dict, List, Optional, Tuple, Union

from multisig_engine.models import SignableTransaction

from .models import TxOutcome

logger = logging.getLogger(__name__)


class SimulationError(ValueError):
    """Raised when a transaction cannot be dry-run."""


class DryRunSubmitter:
    """Records transactions and reports them as final and successful.

    ``failures`` maps a submission index to either an exception to raise or a
    failure message to report as an unsuccessful outcome.
    """

    def __init__(
        self, failures: Optional[Dict[int, Union[Exception, str]]] = None
    ) -> None:
        self._failures = dict(failures or {})
        self._submitted: List[SignableTransaction] = []

    @property
    def submitted(self) -> Tuple[SignableTransaction, ...]:
        return tuple(self._submitted)

    def submit(self, transaction: SignableTransaction) -> TxOutcome:
        _validate_transaction(transaction)
        index = len(self._submitted)
        self._submitted.append(transaction)
        tx_hash = transaction_digest(transaction)
        logger.info("Dry-run submission %s to %s", index, transaction.receiver_id)

        failure = self._failures.get(index)
        if isinstance(failure, Exception):
            raise failure
        if failure is not None:
            return TxOutcome(success=False, transaction_hash=tx_hash, failure=failure)
        return TxOutcome(
            success=True,
            transaction_hash=tx_hash,
            notes=("Dry-run only; no execution performed.",),
        )


def transaction_digest(transaction: SignableTransaction) -> str:
    document = json.dumps(transaction.to_dict(), sort_keys=True).encode("utf-8")
    return hashlib.sha256(document).hexdigest()


def _validate_transaction(transaction: SignableTransaction) -> None:
    if not transaction.signer_id or not transaction.receiver_id:
        raise SimulationError("Transaction must name a signer and a receiver.")
    if not transaction.actions:
        raise SimulationError("Transaction must carry at least one action.")
    for action in transaction.actions:
        if action.deposit < 0 or action.gas <= 0:
            raise SimulationError("Action budgets must be non-negative with positive gas.")
