"""Typed records decoded from lockup contract state."""

from dataclasses import dataclass
from typing import Dict, Optional, Union


@dataclass(frozen=True)
class LockupLayout:
    """Decoding switches for fields whose on-chain layout is unconfirmed.

    ``staking_pool_id_as_u128`` keeps the historical reading of the staking
    pool account id as a 128-bit integer. The field is a string account id in
    the contract source, so deployments may need ``False``.
    """

    staking_pool_id_as_u128: bool = True
    vesting_hash_length_prefixed: bool = False


@dataclass(frozen=True)
class VestingScheduleHash:
    digest: bytes

    def to_dict(self) -> Dict[str, object]:
        return {"type": "VestingHash", "hash": self.digest.hex()}


@dataclass(frozen=True)
class VestingSchedule:
    """Timestamps are nanoseconds since the epoch."""

    start: int
    cliff: int
    end: int

    def to_dict(self) -> Dict[str, object]:
        return {
            "type": "VestingSchedule",
            "start": str(self.start),
            "cliff": str(self.cliff),
            "end": str(self.end),
        }


@dataclass(frozen=True)
class VestingTerminating:
    unvested_amount: int
    termination_status: int

    def to_dict(self) -> Dict[str, object]:
        return {
            "type": "Terminating",
            "unvested_amount": str(self.unvested_amount),
            "termination_status": self.termination_status,
        }


@dataclass(frozen=True)
class UnknownVesting:
    """Discriminant the decoder does not recognise; render as unavailable."""

    tag: int

    def to_dict(self) -> Dict[str, object]:
        return {"type": "Unknown", "tag": self.tag}


VestingInformation = Union[
    VestingScheduleHash, VestingSchedule, VestingTerminating, UnknownVesting
]


@dataclass(frozen=True)
class StakingInformation:
    pool_account_id: Union[str, int]
    status: str
    deposit_amount: int

    def to_dict(self) -> Dict[str, object]:
        return {
            "pool_account_id": str(self.pool_account_id),
            "status": self.status,
            "deposit_amount": str(self.deposit_amount),
        }


@dataclass(frozen=True)
class TransfersDisabledUntil:
    timestamp: int

    def to_dict(self) -> Dict[str, object]:
        return {"type": "DisabledUntil", "timestamp": str(self.timestamp)}


@dataclass(frozen=True)
class TransfersEnabledViaPoll:
    poll_account_id: str

    def to_dict(self) -> Dict[str, object]:
        return {"type": "EnabledViaPoll", "poll_account_id": self.poll_account_id}


TransferInformation = Union[TransfersDisabledUntil, TransfersEnabledViaPoll]


@dataclass(frozen=True)
class LockupState:
    """Snapshot of a lockup contract's state.

    ``complete`` is False when an unrecognised vesting record made the rest
    of the buffer unreadable; the fields after it are then ``None``.
    """

    owner_account_id: str
    lockup_amount: int
    termination_withdrawn_tokens: int
    lockup_duration: int
    release_duration: Optional[int]
    lockup_timestamp: Optional[int]
    transfer: TransferInformation
    vesting: VestingInformation
    staking_pool_whitelist_account_id: Optional[str]
    staking: Optional[StakingInformation]
    foundation_account_id: Optional[str]
    complete: bool = True

    def to_dict(self) -> Dict[str, object]:
        return {
            "owner_account_id": self.owner_account_id,
            "lockup_amount": str(self.lockup_amount),
            "termination_withdrawn_tokens": str(self.termination_withdrawn_tokens),
            "lockup_duration": str(self.lockup_duration),
            "release_duration": _optional_str(self.release_duration),
            "lockup_timestamp": _optional_str(self.lockup_timestamp),
            "transfer": self.transfer.to_dict(),
            "vesting": self.vesting.to_dict(),
            "staking_pool_whitelist_account_id": self.staking_pool_whitelist_account_id,
            "staking": self.staking.to_dict() if self.staking else None,
            "foundation_account_id": self.foundation_account_id,
            "complete": self.complete,
        }


def _optional_str(value: Optional[int]) -> Optional[str]:
    return None if value is None else str(value)
