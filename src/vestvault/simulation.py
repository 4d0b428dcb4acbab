"""
Plan-driven vesting simulation.

A plan describes funding, schedules and a sequence of claims at day
offsets. Running it drives a real ``VestingEngine`` over an in-memory ledger
and a manual clock, recording the outcome of every claim.

Plan format (YAML or an equivalent dict):

    start_time: 1700000000
    engine: {address: vault, owner: admin}
    funding: 36500
    schedules:
      - {title: Seed, beneficiary: alice, amount: 36500, duration: 100}
    claims:
      - {schedule: 0, day: 10}
      - {schedule: 0, day: 10, seconds: 1000}
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .access_control import OwnerAccessPolicy
from .core.release import SECONDS_PER_DAY
from .engine import VestingEngine
from .exceptions import ConfigurationError, VestingError
from .ledger import InMemoryTokenLedger

logger = logging.getLogger("vestvault.simulation")

DEFAULT_START_TIME = 1_700_000_000


class ManualClock:
    def __init__(self, start_time: int):
        self.current_time = start_time

    def now(self) -> int:
        return self.current_time

    def set(self, timestamp: int):
        self.current_time = timestamp

    def advance(self, seconds: int):
        self.current_time += seconds


@dataclass
class ClaimOutcome:
    step: int
    schedule: int
    timestamp: int
    day: int
    outcome: str
    amount: int = 0
    tokens_claimed: Optional[int] = None
    message: str = ""

    @property
    def succeeded(self) -> bool:
        return self.outcome == "success"


@dataclass
class SimulationReport:
    outcomes: List[ClaimOutcome] = field(default_factory=list)
    schedules: List[Dict[str, Any]] = field(default_factory=list)
    engine_balance: int = 0
    total_released: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "claims": [asdict(o) for o in self.outcomes],
            "schedules": self.schedules,
            "engine_balance": self.engine_balance,
            "total_released": self.total_released,
        }


def load_plan(path: str | Path) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            plan = yaml.safe_load(f) or {}
    except OSError as exc:
        raise ConfigurationError(f"Cannot read plan {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in plan {path}: {exc}") from exc
    if not isinstance(plan, dict):
        raise ConfigurationError("Plan must be a mapping")
    return plan


def _int_field(entry: Dict[str, Any], key: str, default: Optional[int] = None) -> int:
    value = entry.get(key, default)
    if value is None:
        raise ConfigurationError(f"Plan entry is missing '{key}': {entry}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Plan field '{key}' must be an integer: {value!r}") from exc


def run_plan(plan: Dict[str, Any]) -> SimulationReport:
    """
    Executes a plan and reports each claim.

    Claim rejections are recorded as outcomes; invalid schedules abort the
    run with the engine's error since nothing meaningful can follow.
    """
    start_time = _int_field(plan, "start_time", DEFAULT_START_TIME)
    engine_cfg = plan.get("engine") or {}
    owner = str(engine_cfg.get("owner", "owner"))
    address = str(engine_cfg.get("address", "vestvault"))

    clock = ManualClock(start_time)
    ledger = InMemoryTokenLedger()
    engine = VestingEngine(ledger, OwnerAccessPolicy(owner), engine_address=address, time_provider=clock.now)

    for entry in plan.get("schedules") or []:
        engine.add_schedule(
            str(entry.get("title", "")),
            str(entry.get("beneficiary", "")),
            _int_field(entry, "amount"),
            _int_field(entry, "duration"),
            caller=owner,
        )

    funding = _int_field(plan, "funding", 0)
    if funding:
        ledger.credit(address, funding)

    report = SimulationReport()
    for step, entry in enumerate(plan.get("claims") or []):
        index = _int_field(entry, "schedule")
        clock.set(start_time + _int_field(entry, "day", 0) * SECONDS_PER_DAY + _int_field(entry, "seconds", 0))
        outcome = ClaimOutcome(
            step=step,
            schedule=index,
            timestamp=clock.now(),
            day=(clock.now() - start_time) // SECONDS_PER_DAY,
            outcome="success",
        )
        try:
            result = engine.claim(index, caller=owner)
        except VestingError as exc:
            outcome.outcome = type(exc).__name__
            outcome.message = exc.message
        else:
            outcome.amount = result.amount
            report.total_released += result.amount
        if 0 <= index < engine.schedule_count():
            outcome.tokens_claimed = engine.get_schedule(index).tokens_claimed
        report.outcomes.append(outcome)

    report.schedules = [s.to_dict() for s in engine.schedules()]
    report.engine_balance = engine.engine_balance()
    logger.info(
        "Simulation finished: %d claims, %d tokens released",
        len(report.outcomes),
        report.total_released,
        extra={"event": "simulation.finished", "claims": len(report.outcomes)},
    )
    return report
