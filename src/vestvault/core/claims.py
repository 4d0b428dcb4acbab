"""
Claim processing for vesting schedules.

Eligibility is checked in a fixed order, each failure with its own error:
engine balance, schedule index, completion, cooldown. State is committed
only after the ledger confirms the transfer, so a failed transfer never
consumes a claim window.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..exceptions import (
    ClaimTooSoonError,
    LedgerError,
    LedgerTransferError,
    NoTokensAvailableError,
    VestingCompletedError,
)
from ..ledger import TokenLedger
from .release import SECONDS_PER_DAY, releasable_amount
from .schedule import ScheduleStore, VestingSchedule

logger = logging.getLogger("vestvault.core.claims")

CLAIM_COOLDOWN_SECONDS = SECONDS_PER_DAY


@dataclass(frozen=True)
class ClaimResult:
    index: int
    beneficiary: str
    amount: int
    claimed_at: int

    def __iter__(self):
        # unpacks as (beneficiary, amount)
        yield self.beneficiary
        yield self.amount


def capped_release(schedule: VestingSchedule, now: int) -> int:
    """Releasable amount limited to what is still unclaimed."""
    return max(0, min(releasable_amount(schedule, now), schedule.remaining))


def next_claim_time(schedule: VestingSchedule) -> int:
    return schedule.last_claim + CLAIM_COOLDOWN_SECONDS


class ClaimProcessor:
    def __init__(
        self,
        store: ScheduleStore,
        ledger: TokenLedger,
        engine_address: str,
    ):
        self.store = store
        self.ledger = ledger
        self.engine_address = engine_address

    def check_eligibility(self, index: int, now: int) -> VestingSchedule:
        """
        Runs every claim precondition and returns the target schedule.

        Raises:
            NoTokensAvailableError: engine holds nothing on the ledger
            InvalidScheduleIndexError: no schedule at ``index``
            VestingCompletedError: allocation fully released
            ClaimTooSoonError: less than a day since the last claim
        """
        balance = self.ledger.balance_of(self.engine_address)
        if balance <= 0:
            raise NoTokensAvailableError(
                "No tokens available in the vesting engine.",
                details={"engine": self.engine_address, "balance": balance},
            )

        schedule = self.store.get(index)

        if schedule.tokens_claimed >= schedule.amount:
            raise VestingCompletedError(
                f"Vesting schedule {index} is already completed.",
                details={"index": index, "amount": schedule.amount},
            )

        eligible_at = next_claim_time(schedule)
        if now < eligible_at:
            raise ClaimTooSoonError(
                f"Vesting schedule {index} was claimed less than a day ago.",
                next_claim_time=eligible_at,
                details={"index": index, "now": now, "next_claim_time": eligible_at},
            )
        return schedule

    def claim(self, index: int, now: int) -> ClaimResult:
        schedule = self.check_eligibility(index, now)
        amount = capped_release(schedule, now)

        try:
            transferred = self.ledger.transfer(self.engine_address, schedule.beneficiary, amount)
        except LedgerError as exc:
            logger.error(
                "Ledger transfer failed for schedule %d",
                index,
                extra={"event": "claim.transfer_failed", "index": index, "amount": amount},
            )
            raise LedgerTransferError(
                f"Ledger transfer for schedule {index} failed: {exc}",
                details={"index": index, "amount": amount, "beneficiary": schedule.beneficiary},
            ) from exc

        if not transferred:
            logger.error(
                "Ledger rejected transfer for schedule %d",
                index,
                extra={"event": "claim.transfer_rejected", "index": index, "amount": amount},
            )
            raise LedgerTransferError(
                f"Ledger rejected transfer of {amount} tokens for schedule {index}.",
                details={"index": index, "amount": amount, "beneficiary": schedule.beneficiary},
            )

        self.store.commit(index, schedule.with_claim(now, amount))
        result = ClaimResult(index=index, beneficiary=schedule.beneficiary, amount=amount, claimed_at=now)
        logger.info(
            "Claimed %d tokens for schedule %d",
            amount,
            index,
            extra={
                "event": "claim.succeeded",
                "index": index,
                "beneficiary": schedule.beneficiary,
                "amount": amount,
                "tokens_claimed": schedule.tokens_claimed + amount,
            },
        )
        return result
