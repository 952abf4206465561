"""Lockup and vesting schedule arithmetic."""

from datetime import datetime, timezone
from typing import Optional

from .models import VestingInformation, VestingSchedule

NANOSECONDS_PER_SECOND = 1_000_000_000
SECONDS_PER_DAY = 60 * 60 * 24

# Transfers were enabled network-wide at this block timestamp (ns).
PHASE_2_TIMESTAMP = 1602614338293769340


def saturating_sub(left: int, right: int) -> int:
    return max(left - right, 0)


def nanoseconds_to_datetime(value: int) -> datetime:
    return datetime.fromtimestamp(value // NANOSECONDS_PER_SECOND, tz=timezone.utc)


def format_vesting_schedule(vesting: VestingInformation) -> Optional[str]:
    """Human summary of a vesting schedule, or None for other records."""

    if not isinstance(vesting, VestingSchedule):
        return None
    start = nanoseconds_to_datetime(vesting.start).isoformat()
    cliff = nanoseconds_to_datetime(vesting.cliff).isoformat()
    end = nanoseconds_to_datetime(vesting.end).isoformat()
    return f"from {start} until {end} with cliff at {cliff}"


def release_duration_days(release_duration: int) -> int:
    return release_duration // NANOSECONDS_PER_SECOND // SECONDS_PER_DAY


def start_lockup_timestamp(
    lockup_duration: int, lockup_timestamp: int, has_broken_timestamp: bool
) -> int:
    if has_broken_timestamp:
        return PHASE_2_TIMESTAMP
    return max(PHASE_2_TIMESTAMP + lockup_duration, lockup_timestamp)
