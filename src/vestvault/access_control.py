"""
Access control for privileged vesting operations.

The engine asks an ``AccessPolicy`` whether a caller may perform an action
before it touches any state. Policies are plain collaborators, so a single
owner can be swapped for role sets or a multi-signature check without
changing the engine.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, Iterable, Optional, Protocol, Set, runtime_checkable

from .exceptions import UnauthorizedError

logger = logging.getLogger(__name__)


class Action(Enum):
    """Privileged engine operations."""
    ADD_SCHEDULE = "add_schedule"
    CLAIM = "claim"


@runtime_checkable
class AccessPolicy(Protocol):
    def is_authorized(self, caller: str, action: Action) -> bool:
        ...


def _normalize(address: Optional[str]) -> str:
    return (address or "").strip().lower()


class OwnerAccessPolicy:
    """
    Single privileged owner.

    Usage:
        policy = OwnerAccessPolicy("0xOwner")
        if policy.is_authorized(caller, Action.CLAIM):
            ...
    """

    def __init__(self, owner: str):
        if not _normalize(owner):
            raise ValueError("Owner address cannot be empty.")
        self._owner: Optional[str] = _normalize(owner)

    @property
    def owner(self) -> Optional[str]:
        return self._owner

    def is_authorized(self, caller: str, action: Action) -> bool:
        allowed = self._owner is not None and _normalize(caller) == self._owner
        if not allowed:
            logger.warning(
                "Access denied",
                extra={
                    "event": "access_control.denied",
                    "caller": _normalize(caller)[:10],
                    "action": action.value,
                },
            )
        return allowed

    def _require_owner(self, caller: str, what: str) -> None:
        if self._owner is None or _normalize(caller) != self._owner:
            raise UnauthorizedError(
                f"Caller {caller} is not authorized to {what}.",
                details={"caller": caller},
            )

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        """Hands the privilege to ``new_owner``. Only the current owner may call this."""
        self._require_owner(caller, "transfer ownership")
        if not _normalize(new_owner):
            raise ValueError("New owner address cannot be empty.")
        previous, self._owner = self._owner, _normalize(new_owner)
        logger.info(
            "Ownership transferred",
            extra={"event": "access_control.ownership_transferred", "previous": previous, "owner": self._owner},
        )

    def renounce_ownership(self, caller: str) -> None:
        """Leaves the policy without an owner; every privileged call is denied afterwards."""
        self._require_owner(caller, "renounce ownership")
        previous, self._owner = self._owner, None
        logger.warning(
            "Ownership renounced",
            extra={"event": "access_control.ownership_renounced", "previous": previous},
        )


class RoleAccessPolicy:
    """Per-action sets of authorized addresses for hosts with several operators."""

    def __init__(self, grants: Optional[Dict[Action, Iterable[str]]] = None):
        self._grants: Dict[Action, Set[str]] = {action: set() for action in Action}
        for action, addresses in (grants or {}).items():
            for address in addresses:
                self.grant(action, address)

    def grant(self, action: Action, address: str) -> None:
        if not _normalize(address):
            raise ValueError("Address cannot be empty.")
        self._grants[action].add(_normalize(address))

    def revoke(self, action: Action, address: str) -> None:
        self._grants[action].discard(_normalize(address))

    def is_authorized(self, caller: str, action: Action) -> bool:
        allowed = _normalize(caller) in self._grants[action]
        if not allowed:
            logger.warning(
                "Access denied: missing role",
                extra={"event": "access_control.denied", "caller": _normalize(caller)[:10], "action": action.value},
            )
        return allowed
