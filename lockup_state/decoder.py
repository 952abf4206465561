"""Decode and encode lockup contract state records."""

import logging
from typing import Optional

from .models import (
    LockupLayout,
    LockupState,
    StakingInformation,
    TransferInformation,
    TransfersDisabledUntil,
    TransfersEnabledViaPoll,
    UnknownVesting,
    VestingInformation,
    VestingSchedule,
    VestingScheduleHash,
    VestingTerminating,
)
from .reader import BinaryReader, BinaryWriter, EncodeError

logger = logging.getLogger(__name__)

VESTING_HASH_LENGTH = 32

_VESTING_HASH_TAG = 1
_VESTING_SCHEDULE_TAG = 2
_VESTING_TERMINATING_TAG = 3

_DEFAULT_LAYOUT = LockupLayout()


def decode_vesting_information(
    reader: BinaryReader, layout: LockupLayout = _DEFAULT_LAYOUT
) -> VestingInformation:
    tag = reader.read_u8()
    if tag == _VESTING_HASH_TAG:
        if layout.vesting_hash_length_prefixed:
            digest = bytes(reader.read_array(reader.read_u8))
        else:
            digest = reader.read_fixed_bytes(VESTING_HASH_LENGTH)
        return VestingScheduleHash(digest=digest)
    if tag == _VESTING_SCHEDULE_TAG:
        return VestingSchedule(
            start=reader.read_u64(),
            cliff=reader.read_u64(),
            end=reader.read_u64(),
        )
    if tag == _VESTING_TERMINATING_TAG:
        return VestingTerminating(
            unvested_amount=reader.read_u128(),
            termination_status=reader.read_u8(),
        )
    logger.debug("Unrecognised vesting tag %s at offset %s", tag, reader.offset - 1)
    return UnknownVesting(tag=tag)


def decode_staking_information(
    reader: BinaryReader, layout: LockupLayout = _DEFAULT_LAYOUT
) -> Optional[StakingInformation]:
    tag = reader.read_u8()
    if tag == 0:
        return None
    if layout.staking_pool_id_as_u128:
        pool_account_id = reader.read_u128()
    else:
        pool_account_id = reader.read_string()
    return StakingInformation(
        pool_account_id=pool_account_id,
        status=reader.read_string(),
        deposit_amount=reader.read_u128(),
    )


def decode_transfer_information(reader: BinaryReader) -> TransferInformation:
    tag = reader.read_u8()
    if tag == 0:
        return TransfersDisabledUntil(timestamp=reader.read_u64())
    return TransfersEnabledViaPoll(poll_account_id=reader.read_string())


def decode_account_state(
    data: bytes, layout: LockupLayout = _DEFAULT_LAYOUT
) -> LockupState:
    """Decode a full lockup state snapshot.

    An unrecognised vesting record does not fail the read. Its payload length
    is unknown, so nothing after it can be located: the remaining fields are
    left empty and the state is marked incomplete.
    """

    reader = BinaryReader(data)
    owner_account_id = reader.read_string()
    lockup_amount = reader.read_u128()
    termination_withdrawn_tokens = reader.read_u128()
    lockup_duration = reader.read_u64()
    release_duration = reader.read_option(reader.read_u64)
    lockup_timestamp = reader.read_option(reader.read_u64)
    transfer = decode_transfer_information(reader)
    vesting = decode_vesting_information(reader, layout)

    if isinstance(vesting, UnknownVesting):
        logger.warning(
            "Lockup state for %s only partially decoded after vesting tag %s (%s bytes skipped)",
            owner_account_id,
            vesting.tag,
            reader.remaining,
        )
        return LockupState(
            owner_account_id=owner_account_id,
            lockup_amount=lockup_amount,
            termination_withdrawn_tokens=termination_withdrawn_tokens,
            lockup_duration=lockup_duration,
            release_duration=release_duration,
            lockup_timestamp=lockup_timestamp,
            transfer=transfer,
            vesting=vesting,
            staking_pool_whitelist_account_id=None,
            staking=None,
            foundation_account_id=None,
            complete=False,
        )

    whitelist_account_id = reader.read_string()
    staking = decode_staking_information(reader, layout)
    foundation_account_id = reader.read_option(reader.read_string)
    return LockupState(
        owner_account_id=owner_account_id,
        lockup_amount=lockup_amount,
        termination_withdrawn_tokens=termination_withdrawn_tokens,
        lockup_duration=lockup_duration,
        release_duration=release_duration,
        lockup_timestamp=lockup_timestamp,
        transfer=transfer,
        vesting=vesting,
        staking_pool_whitelist_account_id=whitelist_account_id,
        staking=staking,
        foundation_account_id=foundation_account_id,
    )


def encode_vesting_information(
    writer: BinaryWriter,
    vesting: VestingInformation,
    layout: LockupLayout = _DEFAULT_LAYOUT,
) -> BinaryWriter:
    if isinstance(vesting, VestingScheduleHash):
        writer.write_u8(_VESTING_HASH_TAG)
        if layout.vesting_hash_length_prefixed:
            writer.write_u32(len(vesting.digest))
            return writer.write_fixed_bytes(vesting.digest, len(vesting.digest))
        return writer.write_fixed_bytes(vesting.digest, VESTING_HASH_LENGTH)
    if isinstance(vesting, VestingSchedule):
        writer.write_u8(_VESTING_SCHEDULE_TAG)
        writer.write_u64(vesting.start)
        writer.write_u64(vesting.cliff)
        return writer.write_u64(vesting.end)
    if isinstance(vesting, VestingTerminating):
        writer.write_u8(_VESTING_TERMINATING_TAG)
        writer.write_u128(vesting.unvested_amount)
        return writer.write_u8(vesting.termination_status)
    if isinstance(vesting, UnknownVesting):
        return writer.write_u8(vesting.tag)
    raise EncodeError(f"Unsupported vesting record: {vesting!r}")


def encode_staking_information(
    writer: BinaryWriter,
    staking: Optional[StakingInformation],
    layout: LockupLayout = _DEFAULT_LAYOUT,
) -> BinaryWriter:
    if staking is None:
        return writer.write_u8(0)
    writer.write_u8(1)
    if layout.staking_pool_id_as_u128:
        if not isinstance(staking.pool_account_id, int):
            raise EncodeError("Layout expects an integer staking pool id.")
        writer.write_u128(staking.pool_account_id)
    else:
        writer.write_string(str(staking.pool_account_id))
    writer.write_string(staking.status)
    return writer.write_u128(staking.deposit_amount)


def encode_transfer_information(
    writer: BinaryWriter, transfer: TransferInformation
) -> BinaryWriter:
    if isinstance(transfer, TransfersDisabledUntil):
        writer.write_u8(0)
        return writer.write_u64(transfer.timestamp)
    writer.write_u8(1)
    return writer.write_string(transfer.poll_account_id)


def encode_account_state(
    state: LockupState, layout: LockupLayout = _DEFAULT_LAYOUT
) -> bytes:
    if not state.complete:
        raise EncodeError("Partially decoded state cannot be re-encoded.")
    writer = BinaryWriter()
    writer.write_string(state.owner_account_id)
    writer.write_u128(state.lockup_amount)
    writer.write_u128(state.termination_withdrawn_tokens)
    writer.write_u64(state.lockup_duration)
    writer.write_option(state.release_duration, writer.write_u64)
    writer.write_option(state.lockup_timestamp, writer.write_u64)
    encode_transfer_information(writer, state.transfer)
    encode_vesting_information(writer, state.vesting, layout)
    writer.write_string(state.staking_pool_whitelist_account_id or "")
    encode_staking_information(writer, state.staking, layout)
    writer.write_option(state.foundation_account_id, writer.write_string)
    return writer.to_bytes()
