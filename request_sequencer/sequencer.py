"""Strictly sequential submission of dependent requests."""

import functools
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from chain_adapter.near.models import ChainError, Submitter, SubmissionUnknownError, TxOutcome
from multisig_engine.builder import request_targets
from multisig_engine.models import SignableTransaction

from .results import (
    Cancelled,
    Completed,
    ExecutionFailure,
    FailedAt,
    OutcomeUnknown,
    SequenceResult,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SequenceStep:
    label: str
    submit: Callable[[], TxOutcome]


class Sequencer:
    """Runs steps one at a time, stopping at the first failure.

    A step starts only after the previous step's outcome is final. Nothing is
    retried; the failing index is reported so the caller can decide.
    """

    def run(
        self,
        steps: Sequence[SequenceStep],
        should_continue: Optional[Callable[[int, SequenceStep], bool]] = None,
    ) -> SequenceResult:
        outcomes: List[TxOutcome] = []
        for index, step in enumerate(steps):
            if should_continue is not None and not should_continue(index, step):
                logger.info("Sequence abandoned before step %s (%s)", index, step.label)
                return Cancelled(step_index=index, outcomes=tuple(outcomes))

            logger.info("Step %s/%s: %s", index + 1, len(steps), step.label)
            try:
                outcome = step.submit()
            except SubmissionUnknownError as exc:
                logger.error("Step %s (%s) outcome unknown: %s", index, step.label, exc)
                return OutcomeUnknown(step_index=index, cause=exc, outcomes=tuple(outcomes))
            except ChainError as exc:
                logger.error("Step %s (%s) failed: %s", index, step.label, exc)
                return FailedAt(step_index=index, cause=exc, outcomes=tuple(outcomes))
            except Exception as exc:
                # The step may already have reached the network.
                logger.exception("Step %s (%s) raised unexpectedly", index, step.label)
                return OutcomeUnknown(step_index=index, cause=exc, outcomes=tuple(outcomes))

            if not outcome.success:
                cause = ExecutionFailure(
                    f"{step.label} failed on-chain: {outcome.failure}", outcome=outcome
                )
                logger.error("Step %s (%s) failed on-chain: %s", index, step.label, outcome.failure)
                return FailedAt(step_index=index, cause=cause, outcomes=tuple(outcomes))
            outcomes.append(outcome)

        logger.info("Sequence of %s step(s) completed", len(steps))
        return Completed(outcomes=tuple(outcomes))


def build_steps(
    transactions: Sequence[SignableTransaction],
    submitter: Submitter,
    labels: Optional[Sequence[str]] = None,
) -> List[SequenceStep]:
    if labels is None:
        labels = [f"request to {target}" for target in request_targets(transactions)]
    elif len(labels) != len(transactions):
        raise ValueError("Each transaction needs exactly one label.")
    return [
        SequenceStep(label=label, submit=functools.partial(submitter.submit, transaction))
        for label, transaction in zip(labels, transactions)
    ]


def run_sequence(
    transactions: Sequence[SignableTransaction],
    submitter: Submitter,
    labels: Optional[Sequence[str]] = None,
    should_continue: Optional[Callable[[int, SequenceStep], bool]] = None,
) -> SequenceResult:
    return Sequencer().run(build_steps(transactions, submitter, labels), should_continue)
