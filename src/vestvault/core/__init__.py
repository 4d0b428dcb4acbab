"""
Vesting accounting core: schedule store, factory, release calculator and
claim processor.
"""

from .claims import CLAIM_COOLDOWN_SECONDS, ClaimProcessor, ClaimResult
from .factory import build_batch, build_schedule
from .release import DAYS_PER_YEAR, SECONDS_PER_DAY, daily_rate, releasable_amount
from .schedule import ScheduleStore, VestingSchedule

__all__ = [
    "CLAIM_COOLDOWN_SECONDS",
    "ClaimProcessor",
    "ClaimResult",
    "DAYS_PER_YEAR",
    "SECONDS_PER_DAY",
    "ScheduleStore",
    "VestingSchedule",
    "build_batch",
    "build_schedule",
    "daily_rate",
    "releasable_amount",
]
