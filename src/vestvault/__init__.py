"""
vestvault - Token Vesting Engine

Linear token vesting with a one-day claim cooldown, funded from a single
ledger identity and gated by a pluggable access policy.

Main Components:
- Core: schedule store, factory, release calculator, claim processor
- Engine: the VestingEngine facade over the core
- Ledger: token balance/transfer collaborator with an in-memory implementation
- Access Control: owner and role based policies
"""

__version__ = "0.1.0"
__author__ = "vestvault Development Team"

from .access_control import AccessPolicy, Action, OwnerAccessPolicy, RoleAccessPolicy
from .core import VestingSchedule
from .engine import VestingEngine
from .ledger import InMemoryTokenLedger, TokenLedger

__all__ = [
    "AccessPolicy",
    "Action",
    "InMemoryTokenLedger",
    "OwnerAccessPolicy",
    "RoleAccessPolicy",
    "TokenLedger",
    "VestingEngine",
    "VestingSchedule",
]
