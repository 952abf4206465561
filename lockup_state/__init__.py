from .decoder import (
    decode_account_state,
    decode_staking_information,
    decode_transfer_information,
    decode_vesting_information,
    encode_account_state,
    encode_staking_information,
    encode_transfer_information,
    encode_vesting_information,
)
from .models import (
    LockupLayout,
    LockupState,
    StakingInformation,
    TransfersDisabledUntil,
    TransfersEnabledViaPoll,
    UnknownVesting,
    VestingSchedule,
    VestingScheduleHash,
    VestingTerminating,
)
from .reader import (
    BinaryReader,
    BinaryWriter,
    DecodeError,
    EncodeError,
    InvalidTagError,
    InvalidUtf8Error,
    UnexpectedEndError,
)

__all__ = [
    "BinaryReader",
    "BinaryWriter",
    "DecodeError",
    "EncodeError",
    "InvalidTagError",
    "InvalidUtf8Error",
    "LockupLayout",
    "LockupState",
    "StakingInformation",
    "TransfersDisabledUntil",
    "TransfersEnabledViaPoll",
    "UnexpectedEndError",
    "UnknownVesting",
    "VestingSchedule",
    "VestingScheduleHash",
    "VestingTerminating",
    "decode_account_state",
    "decode_staking_information",
    "decode_transfer_information",
    "decode_vesting_information",
    "encode_account_state",
    "encode_staking_information",
    "encode_transfer_information",
    "encode_vesting_information",
]
