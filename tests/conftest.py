"""
Test configuration and fixtures
"""
import logging
import os
import sys
from pathlib import Path

# Add src to Python path
project_root = Path(__file__).parent.parent
src_path = project_root / "src"
sys.path.insert(0, str(src_path))

import pytest

from vestvault import metrics
from vestvault.access_control import OwnerAccessPolicy
from vestvault.engine import VestingEngine
from vestvault.ledger import InMemoryTokenLedger

OWNER = "0xowner"
ENGINE_ADDRESS = "0xvault"
START_TIME = 1_700_000_000
DAY = 86_400


class ManualClock:
    def __init__(self, start_time: int):
        self.current_time = start_time

    def now(self) -> int:
        return self.current_time

    def advance(self, seconds: int):
        self.current_time += seconds


@pytest.fixture(autouse=True)
def _reset_global_state(monkeypatch):
    """Keep logger levels, metrics toggles and VESTVAULT_* variables test-local."""
    for name in list(os.environ):
        if name.startswith("VESTVAULT_"):
            monkeypatch.delenv(name, raising=False)
    yield
    metrics.set_enabled(True)
    vv_logger = logging.getLogger("vestvault")
    for handler in list(vv_logger.handlers):
        vv_logger.removeHandler(handler)
        handler.close()
    vv_logger.setLevel(logging.NOTSET)


@pytest.fixture
def clock():
    return ManualClock(START_TIME)


@pytest.fixture
def ledger():
    return InMemoryTokenLedger()


@pytest.fixture
def policy():
    return OwnerAccessPolicy(OWNER)


@pytest.fixture
def engine(ledger, policy, clock):
    return VestingEngine(ledger, policy, engine_address=ENGINE_ADDRESS, time_provider=clock.now)


@pytest.fixture
def funded_engine(engine, ledger):
    """Engine holding one million tokens."""
    ledger.credit(ENGINE_ADDRESS, 1_000_000)
    return engine
