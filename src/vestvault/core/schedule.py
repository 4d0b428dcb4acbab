from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Iterator, List

from ..exceptions import InvalidScheduleIndexError, VestingError

logger = logging.getLogger("vestvault.core.schedule")


@dataclass(frozen=True)
class VestingSchedule:
    """
    One beneficiary allocation.

    Instances are immutable snapshots; the store swaps in a new snapshot
    when a claim commits, so callers holding an old one never see it change.
    """

    title: str
    beneficiary: str
    amount: int
    duration: int
    start_time: int
    last_claim: int
    tokens_claimed: int = 0

    @property
    def remaining(self) -> int:
        return self.amount - self.tokens_claimed

    @property
    def is_completed(self) -> bool:
        return self.tokens_claimed >= self.amount

    def with_claim(self, claimed_at: int, released: int) -> "VestingSchedule":
        """Snapshot after a successful claim of ``released`` tokens at ``claimed_at``."""
        return replace(
            self,
            last_claim=claimed_at,
            tokens_claimed=self.tokens_claimed + released,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["remaining"] = self.remaining
        data["is_completed"] = self.is_completed
        return data


class ScheduleStore:
    """
    Append-only ordered collection of vesting schedules.

    The position of a schedule is its permanent identifier. Nothing is ever
    removed or compacted, so an index handed out once stays valid for the
    lifetime of the store.
    """

    def __init__(self) -> None:
        self._schedules: List[VestingSchedule] = []

    def __len__(self) -> int:
        return len(self._schedules)

    def __iter__(self) -> Iterator[VestingSchedule]:
        return iter(list(self._schedules))

    def append(self, schedule: VestingSchedule) -> int:
        index = len(self._schedules)
        self._schedules.append(schedule)
        logger.debug("Stored schedule %d for %s", index, schedule.beneficiary)
        return index

    def extend(self, schedules: List[VestingSchedule]) -> List[int]:
        first = len(self._schedules)
        self._schedules.extend(schedules)
        return list(range(first, len(self._schedules)))

    def get(self, index: int) -> VestingSchedule:
        if not self.contains(index):
            raise InvalidScheduleIndexError(
                f"Vesting schedule {index} not found.",
                index=index,
                details={"index": index, "count": len(self._schedules)},
            )
        return self._schedules[index]

    def contains(self, index: int) -> bool:
        # bool is an int subclass; reject it along with negatives so that
        # Python's reverse indexing never aliases another schedule
        return (
            isinstance(index, int)
            and not isinstance(index, bool)
            and 0 <= index < len(self._schedules)
        )

    def commit(self, index: int, updated: VestingSchedule) -> None:
        """Replace the schedule at ``index`` with a post-claim snapshot."""
        current = self.get(index)
        if (
            updated.title != current.title
            or updated.beneficiary != current.beneficiary
            or updated.amount != current.amount
            or updated.duration != current.duration
            or updated.start_time != current.start_time
        ):
            raise VestingError(
                "Immutable schedule fields cannot change after creation",
                details={"index": index},
            )
        if updated.last_claim < current.last_claim or updated.tokens_claimed < current.tokens_claimed:
            raise VestingError(
                "Claim state must be non-decreasing",
                details={"index": index},
            )
        if updated.tokens_claimed > updated.amount:
            raise VestingError(
                "Claimed tokens cannot exceed the allocation",
                details={"index": index, "amount": updated.amount, "claimed": updated.tokens_claimed},
            )
        self._schedules[index] = updated
