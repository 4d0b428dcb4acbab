"""
Linear release calculation for vesting schedules.

The daily rate is derived in two floor-division steps: the allocation is
first divided by the duration in seconds, and that figure is divided again
by the number of days in a year. Floor division is not associative, so the
order must not be collapsed into ``amount // (duration * 365)``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..exceptions import ZeroDurationError

if TYPE_CHECKING:
    from .schedule import VestingSchedule

SECONDS_PER_DAY = 86_400
DAYS_PER_YEAR = 365


def daily_rate(amount: int, duration: int) -> int:
    """Tokens released per elapsed whole day."""
    if duration == 0:
        raise ZeroDurationError(
            "Vesting duration is zero; release rate is undefined",
            details={"amount": amount},
        )
    return (amount // duration) // DAYS_PER_YEAR


def days_elapsed(start_time: int, now: int) -> int:
    """Whole days between start_time and now."""
    if now <= start_time:
        return 0
    return (now - start_time) // SECONDS_PER_DAY


def releasable_amount(schedule: "VestingSchedule", now: int) -> int:
    """
    Amount the schedule is eligible to release at ``now``.

    Counts whole days since the schedule started, not since the last claim,
    and is not capped against what has already been claimed. Capping is the
    claim processor's job.

    Args:
        schedule: Schedule to evaluate
        now: Unix timestamp

    Returns:
        rate * days_passed
    """
    rate = daily_rate(schedule.amount, schedule.duration)
    return rate * days_elapsed(schedule.start_time, now)
