"""
Schedule construction and validation.
"""

from __future__ import annotations

import logging
from typing import List, Sequence

from ..exceptions import InputLengthMismatchError, ScheduleValidationError, ZeroDurationError
from .schedule import VestingSchedule

logger = logging.getLogger("vestvault.core.factory")


def _require_int(name: str, value: object) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ScheduleValidationError(
            f"{name} must be an integer, got {type(value).__name__}.",
            details={"field": name},
        )
    return value


def build_schedule(
    title: str,
    beneficiary: str,
    amount: int,
    duration: int,
    now: int,
) -> VestingSchedule:
    """
    Validates parameters and builds a fresh schedule starting at ``now``.

    Raises:
        ZeroDurationError: duration is zero
        ScheduleValidationError: any other invalid parameter
    """
    if not isinstance(title, str):
        raise ScheduleValidationError("Title must be a string.", details={"field": "title"})
    if not beneficiary or not isinstance(beneficiary, str):
        raise ScheduleValidationError(
            "Beneficiary address cannot be empty.", details={"field": "beneficiary"}
        )
    amount = _require_int("amount", amount)
    duration = _require_int("duration", duration)
    now = _require_int("now", now)

    if duration == 0:
        raise ZeroDurationError(
            "Vesting duration must be greater than zero.",
            details={"field": "duration", "beneficiary": beneficiary},
        )
    if duration < 0:
        raise ScheduleValidationError(
            "Vesting duration cannot be negative.", details={"field": "duration", "value": duration}
        )
    if amount <= 0:
        raise ScheduleValidationError(
            "Total amount must be a positive number.", details={"field": "amount", "value": amount}
        )

    return VestingSchedule(
        title=title,
        beneficiary=beneficiary,
        amount=amount,
        duration=duration,
        start_time=now,
        last_claim=now,
        tokens_claimed=0,
    )


def build_batch(
    titles: Sequence[str],
    beneficiaries: Sequence[str],
    amounts: Sequence[int],
    durations: Sequence[int],
    now: int,
) -> List[VestingSchedule]:
    """
    Builds one schedule per (title, beneficiary, amount, duration) tuple.

    Nothing is returned unless every tuple validates, so the caller can
    append the whole batch or nothing at all.
    """
    lengths = {
        "titles": len(titles),
        "beneficiaries": len(beneficiaries),
        "amounts": len(amounts),
        "durations": len(durations),
    }
    if len(set(lengths.values())) != 1:
        logger.warning(
            "Rejected schedule batch with mismatched input lengths",
            extra={"event": "schedule.batch_length_mismatch", "lengths": lengths},
        )
        raise InputLengthMismatchError(
            "Schedule inputs must all have the same length.", lengths=lengths
        )

    return [
        build_schedule(title, beneficiary, amount, duration, now)
        for title, beneficiary, amount, duration in zip(titles, beneficiaries, amounts, durations)
    ]
