"""
Tests for the linear release calculation.
"""

import pytest

from vestvault.core.release import (
    DAYS_PER_YEAR,
    SECONDS_PER_DAY,
    daily_rate,
    days_elapsed,
    releasable_amount,
)
from vestvault.core.schedule import VestingSchedule
from vestvault.exceptions import ScheduleValidationError, ZeroDurationError

START = 1_700_000_000


def make_schedule(amount=36_500, duration=100, claimed=0):
    return VestingSchedule(
        title="Seed",
        beneficiary="0xalice",
        amount=amount,
        duration=duration,
        start_time=START,
        last_claim=START,
        tokens_claimed=claimed,
    )


class TestDailyRate:
    def test_constants(self):
        assert SECONDS_PER_DAY == 86_400
        assert DAYS_PER_YEAR == 365

    def test_rate_is_one_for_reference_schedule(self):
        assert daily_rate(36_500, 100) == 1

    def test_rate_floors_per_second_total_first(self):
        # 1_000_000 // 7 = 142_857, then // 365 = 391
        assert daily_rate(1_000_000, 7) == 391

    def test_rate_truncates_to_zero_for_small_allocations(self):
        assert daily_rate(100, 100) == 0
        assert daily_rate(364, 1) == 0
        assert daily_rate(365, 1) == 1

    def test_zero_duration_raises(self):
        with pytest.raises(ZeroDurationError):
            daily_rate(1_000, 0)

    def test_zero_duration_is_a_validation_error(self):
        assert issubclass(ZeroDurationError, ScheduleValidationError)


class TestDaysElapsed:
    def test_partial_days_are_floored(self):
        assert days_elapsed(START, START + SECONDS_PER_DAY - 1) == 0
        assert days_elapsed(START, START + SECONDS_PER_DAY) == 1
        assert days_elapsed(START, START + 10 * SECONDS_PER_DAY + 5_000) == 10

    def test_time_before_start_counts_as_zero(self):
        assert days_elapsed(START, START - 5 * SECONDS_PER_DAY) == 0


class TestReleasableAmount:
    def test_ten_days_at_unit_rate(self):
        schedule = make_schedule()
        assert releasable_amount(schedule, START + 10 * SECONDS_PER_DAY) == 10

    def test_measured_from_start_not_last_claim(self):
        schedule = make_schedule(claimed=10)
        # the previous claim does not reduce the figure
        assert releasable_amount(schedule, START + 12 * SECONDS_PER_DAY) == 12

    def test_not_capped_by_allocation(self):
        schedule = make_schedule(amount=3_650, duration=1)
        # rate 10/day; 400 days would exceed the 3_650 allocation
        assert releasable_amount(schedule, START + 400 * SECONDS_PER_DAY) == 4_000

    def test_is_pure(self):
        schedule = make_schedule()
        at = START + 3 * SECONDS_PER_DAY
        assert releasable_amount(schedule, at) == releasable_amount(schedule, at)
        assert schedule.tokens_claimed == 0
        assert schedule.last_claim == START
