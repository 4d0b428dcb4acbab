"""
Prometheus instrumentation for the vesting engine.

Helpers are called from the claim path after state has committed and do
nothing while metrics are disabled.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge

schedules_created_counter = Counter(
    "vestvault_schedules_created_total", "Total vesting schedules created"
)

claim_counter = Counter(
    "vestvault_claims_total", "Claim attempts by outcome", ["outcome"]
)

tokens_released_counter = Counter(
    "vestvault_tokens_released_total", "Total tokens transferred to beneficiaries"
)

engine_balance_gauge = Gauge(
    "vestvault_engine_balance", "Tokens held by the vesting engine", ["address"]
)

_enabled = True


def set_enabled(enabled: bool) -> None:
    global _enabled
    _enabled = bool(enabled)


def record_schedule_created(count: int = 1) -> None:
    if _enabled and count > 0:
        schedules_created_counter.inc(count)


def record_claim(outcome: str, released: int = 0) -> None:
    """Count a claim attempt; ``outcome`` is "success" or the error class name."""
    if not _enabled:
        return
    claim_counter.labels(outcome=outcome).inc()
    if released > 0:
        tokens_released_counter.inc(released)


def update_engine_balance(address: str, balance: int) -> None:
    if _enabled:
        engine_balance_gauge.labels(address=address).set(balance)
