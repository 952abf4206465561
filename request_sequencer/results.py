"""Terminal states of a sequence run."""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Union

from chain_adapter.near.models import TxOutcome


class ExecutionFailure(RuntimeError):
    """A step reached finality but the transaction failed on-chain."""

    def __init__(self, message: str, outcome: Optional[TxOutcome] = None) -> None:
        super().__init__(message)
        self.outcome = outcome


class SequenceCancelled(RuntimeError):
    """The caller abandoned the run before a step was submitted."""


class SequenceFailure(RuntimeError):
    """Raised for a run that stopped at ``step_index``.

    Steps before ``step_index`` already took effect and are not rolled back,
    so only the failed step may be retried, never the whole sequence.
    """

    def __init__(self, step_index: int, cause: BaseException, unknown: bool = False) -> None:
        self.step_index = step_index
        self.cause = cause
        self.unknown = unknown
        state = "has an unknown outcome" if unknown else "failed"
        super().__init__(
            f"Step {step_index} {state}: {cause}. "
            f"Steps 0..{step_index - 1} already took effect on-chain and were not rolled back."
            if step_index > 0
            else f"Step 0 {state}: {cause}. No earlier steps were submitted."
        )


def _outcome_dict(outcome: TxOutcome) -> Dict[str, object]:
    return {
        "success": outcome.success,
        "transaction_hash": outcome.transaction_hash,
        "failure": outcome.failure,
        "notes": list(outcome.notes),
    }


@dataclass(frozen=True)
class Completed:
    outcomes: Tuple[TxOutcome, ...]

    @property
    def succeeded(self) -> bool:
        return True

    def raise_for_failure(self) -> None:
        return None

    def to_dict(self) -> Dict[str, object]:
        return {
            "status": "completed",
            "outcomes": [_outcome_dict(outcome) for outcome in self.outcomes],
        }


@dataclass(frozen=True)
class FailedAt:
    """``outcomes`` holds the final outcomes of the steps before ``step_index``."""

    step_index: int
    cause: BaseException
    outcomes: Tuple[TxOutcome, ...] = ()

    @property
    def succeeded(self) -> bool:
        return False

    def raise_for_failure(self) -> None:
        raise SequenceFailure(self.step_index, self.cause) from self.cause

    def to_dict(self) -> Dict[str, object]:
        return {
            "status": "failed",
            "step_index": self.step_index,
            "cause": str(self.cause),
            "outcomes": [_outcome_dict(outcome) for outcome in self.outcomes],
        }


@dataclass(frozen=True)
class OutcomeUnknown:
    """The step was handed to the network but its final result is unknown."""

    step_index: int
    cause: BaseException
    outcomes: Tuple[TxOutcome, ...] = ()

    @property
    def succeeded(self) -> bool:
        return False

    def raise_for_failure(self) -> None:
        raise SequenceFailure(self.step_index, self.cause, unknown=True) from self.cause

    def to_dict(self) -> Dict[str, object]:
        return {
            "status": "outcome_unknown",
            "step_index": self.step_index,
            "cause": str(self.cause),
            "outcomes": [_outcome_dict(outcome) for outcome in self.outcomes],
        }


@dataclass(frozen=True)
class Cancelled:
    step_index: int
    outcomes: Tuple[TxOutcome, ...] = ()

    @property
    def succeeded(self) -> bool:
        return False

    def raise_for_failure(self) -> None:
        cause = SequenceCancelled("cancelled before submission")
        raise SequenceFailure(self.step_index, cause)

    def to_dict(self) -> Dict[str, object]:
        return {
            "status": "cancelled",
            "step_index": self.step_index,
            "outcomes": [_outcome_dict(outcome) for outcome in self.outcomes],
        }


SequenceResult = Union[Completed, FailedAt, OutcomeUnknown, Cancelled]
