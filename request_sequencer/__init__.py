from .results import (
    Cancelled,
    Completed,
    ExecutionFailure,
    FailedAt,
    OutcomeUnknown,
    SequenceCancelled,
    SequenceFailure,
    SequenceResult,
)
from .sequencer import SequenceStep, Sequencer, build_steps, run_sequence
from .flows import (
    PlannedStep,
    burrow_supply_steps,
    create_lockup_steps,
    lockup_account_id,
    ref_deposit_steps,
    ref_stable_deposit_steps,
    ref_withdraw_steps,
    run_flow,
    terminate_vesting_steps,
    termination_prepare_to_withdraw_steps,
    termination_withdraw_steps,
)

__all__ = [
    "Cancelled",
    "Completed",
    "ExecutionFailure",
    "FailedAt",
    "OutcomeUnknown",
    "PlannedStep",
    "SequenceCancelled",
    "SequenceFailure",
    "SequenceResult",
    "SequenceStep",
    "Sequencer",
    "build_steps",
    "burrow_supply_steps",
    "create_lockup_steps",
    "lockup_account_id",
    "ref_deposit_steps",
    "ref_stable_deposit_steps",
    "ref_withdraw_steps",
    "run_flow",
    "run_sequence",
    "terminate_vesting_steps",
    "termination_prepare_to_withdraw_steps",
    "termination_withdraw_steps",
]
