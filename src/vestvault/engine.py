"""
Vesting engine facade.

Ties the schedule store, factory, release calculator and claim processor to
the two external collaborators: the token ledger holding the engine's funds
and the access policy gating privileged calls.

Usage:
    ledger = InMemoryTokenLedger()
    engine = VestingEngine(ledger, OwnerAccessPolicy("0xowner"), engine_address="0xvault")
    index = engine.add_schedule("Seed", "0xalice", 36_500, 100, caller="0xowner")
    ledger.credit("0xvault", 36_500)
    beneficiary, amount = engine.claim(index, caller="0xowner", now=later)
"""

from __future__ import annotations

import logging
import threading
import time
from typing import TYPE_CHECKING, Callable, List, Optional, Sequence

from . import metrics
from .access_control import AccessPolicy, Action, OwnerAccessPolicy
from .core.claims import ClaimProcessor, ClaimResult, capped_release, next_claim_time
from .core.factory import build_batch, build_schedule
from .core.release import releasable_amount
from .core.schedule import ScheduleStore, VestingSchedule
from .exceptions import ClaimError, ConfigurationError, UnauthorizedError, VestingError
from .ledger import TokenLedger

if TYPE_CHECKING:
    from .config import VestVaultConfig

logger = logging.getLogger("vestvault.engine")

DEFAULT_ENGINE_ADDRESS = "vestvault"


class VestingEngine:
    """
    Manages an append-only set of vesting schedules funded from one ledger identity.

    Every operation runs to completion under a single re-entrant lock, and a
    claim commits its state only after the ledger transfer succeeds.
    """

    def __init__(
        self,
        ledger: TokenLedger,
        access_policy: AccessPolicy,
        engine_address: str = DEFAULT_ENGINE_ADDRESS,
        time_provider: Optional[Callable[[], int]] = None,
    ):
        if not engine_address:
            raise ValueError("Engine address cannot be empty.")
        self.ledger = ledger
        self.access_policy = access_policy
        self.engine_address = engine_address
        self._store = ScheduleStore()
        self._claims = ClaimProcessor(self._store, ledger, engine_address)
        self._lock = threading.RLock()
        self._time_provider = time_provider or (lambda: int(time.time()))
        logger.info(
            "VestingEngine initialized for %s",
            engine_address,
            extra={"event": "engine.initialized", "engine": engine_address},
        )

    @classmethod
    def from_batches(
        cls,
        ledger: TokenLedger,
        access_policy: AccessPolicy,
        titles: Sequence[str],
        beneficiaries: Sequence[str],
        amounts: Sequence[int],
        durations: Sequence[int],
        engine_address: str = DEFAULT_ENGINE_ADDRESS,
        time_provider: Optional[Callable[[], int]] = None,
    ) -> "VestingEngine":
        """
        Builds an engine pre-loaded with one schedule per input tuple.

        Runs at construction time, before any owner exists to authorize
        calls. Either every schedule is created or the engine is not.

        Raises:
            InputLengthMismatchError: the four sequences differ in length
            ScheduleValidationError: any tuple is invalid
        """
        engine = cls(ledger, access_policy, engine_address=engine_address, time_provider=time_provider)
        schedules = build_batch(titles, beneficiaries, amounts, durations, engine._current_time())
        engine._store.extend(schedules)
        metrics.record_schedule_created(len(schedules))
        logger.info(
            "Loaded %d initial vesting schedules",
            len(schedules),
            extra={"event": "engine.batch_loaded", "count": len(schedules)},
        )
        return engine

    @classmethod
    def from_config(
        cls,
        config: "VestVaultConfig",
        ledger: TokenLedger,
        time_provider: Optional[Callable[[], int]] = None,
    ) -> "VestingEngine":
        """Engine owned by ``config.engine.owner`` holding funds under ``config.engine.address``."""
        if not config.engine.owner:
            raise ConfigurationError("engine.owner must be set to build an engine")
        return cls(
            ledger,
            OwnerAccessPolicy(config.engine.owner),
            engine_address=config.engine.address,
            time_provider=time_provider,
        )

    def _current_time(self) -> int:
        timestamp = self._time_provider()
        try:
            return int(timestamp)
        except (TypeError, ValueError) as exc:
            raise ValueError("time_provider must return an integer timestamp") from exc

    def _resolve_time(self, now: Optional[int]) -> int:
        if now is None:
            return self._current_time()
        if not isinstance(now, int) or isinstance(now, bool):
            raise ValueError(f"now must be an integer timestamp, got {type(now).__name__}")
        return now

    def _authorize(self, caller: str, action: Action) -> None:
        if not self.access_policy.is_authorized(caller, action):
            raise UnauthorizedError(
                f"Caller {caller} is not authorized to {action.value}.",
                details={"caller": caller, "action": action.value},
            )

    # ==================== Mutating operations ====================

    def add_schedule(
        self,
        title: str,
        beneficiary: str,
        amount: int,
        duration: int,
        *,
        caller: str,
        now: Optional[int] = None,
    ) -> int:
        """
        Creates a vesting schedule starting now and returns its index.

        Raises:
            UnauthorizedError: caller is not privileged
            ZeroDurationError: duration is zero
            ScheduleValidationError: other invalid parameters
        """
        self._authorize(caller, Action.ADD_SCHEDULE)
        with self._lock:
            created_at = self._current_time() if now is None else now
            schedule = build_schedule(title, beneficiary, amount, duration, created_at)
            index = self._store.append(schedule)
        metrics.record_schedule_created()
        logger.info(
            "Vesting schedule %d created for %s",
            index,
            beneficiary,
            extra={
                "event": "schedule.created",
                "index": index,
                "beneficiary": beneficiary,
                "amount": amount,
                "duration": duration,
            },
        )
        return index

    def claim(self, index: int, *, caller: str, now: Optional[int] = None) -> ClaimResult:
        """
        Releases vested tokens for schedule ``index`` to its beneficiary.

        The result unpacks as ``(beneficiary, amount)``.

        Raises:
            UnauthorizedError: caller is not privileged
            NoTokensAvailableError: engine balance is zero
            InvalidScheduleIndexError: unknown index
            VestingCompletedError: allocation already fully released
            ClaimTooSoonError: cooldown has not elapsed
            LedgerTransferError: the ledger did not move the tokens
            ValueError: ``now`` is not an integer timestamp
        """
        self._authorize(caller, Action.CLAIM)
        claimed_at = self._resolve_time(now)
        with self._lock:
            try:
                result = self._claims.claim(index, claimed_at)
            except VestingError as exc:
                metrics.record_claim(type(exc).__name__)
                logger.warning(
                    "Claim for schedule %s rejected: %s",
                    index,
                    exc.message,
                    extra={"event": "claim.rejected", "index": index, "reason": type(exc).__name__},
                )
                raise
            metrics.record_claim("success", result.amount)
            metrics.update_engine_balance(self.engine_address, self.ledger.balance_of(self.engine_address))
        return result

    # ==================== Read operations ====================

    def engine_balance(self) -> int:
        """Tokens the engine currently holds on the ledger."""
        balance = self.ledger.balance_of(self.engine_address)
        metrics.update_engine_balance(self.engine_address, balance)
        return balance

    def get_schedule(self, index: int) -> VestingSchedule:
        with self._lock:
            return self._store.get(index)

    def schedule_count(self) -> int:
        with self._lock:
            return len(self._store)

    def schedules(self) -> List[VestingSchedule]:
        with self._lock:
            return list(self._store)

    def schedules_for(self, beneficiary: str) -> List[int]:
        with self._lock:
            return [i for i, s in enumerate(self._store) if s.beneficiary == beneficiary]

    def releasable_amount(self, index: int, now: Optional[int] = None) -> int:
        """Uncapped release figure for ``index`` at ``now``."""
        schedule = self.get_schedule(index)
        return releasable_amount(schedule, self._resolve_time(now))

    def claimable_amount(self, index: int, now: Optional[int] = None) -> int:
        """What a claim at ``now`` would transfer, or 0 if it would be rejected."""
        at = self._resolve_time(now)
        with self._lock:
            self._store.get(index)
            try:
                schedule = self._claims.check_eligibility(index, at)
            except ClaimError:
                return 0
            return capped_release(schedule, at)

    def next_claim_time(self, index: int) -> int:
        return next_claim_time(self.get_schedule(index))

    def total_allocated(self) -> int:
        with self._lock:
            return sum(s.amount for s in self._store)

    def total_claimed(self) -> int:
        with self._lock:
            return sum(s.tokens_claimed for s in self._store)
