"""
Fungible token ledger collaborator.

The engine only ever reads its own balance and transfers tokens out.
Inbound funding goes through ``credit``, which the host's transport layer
invokes when tokens arrive for an address.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Dict, List, Protocol, runtime_checkable

from .exceptions import LedgerError

logger = logging.getLogger("vestvault.ledger")


@runtime_checkable
class TokenLedger(Protocol):
    """Balance query and transfer operations the engine depends on."""

    def balance_of(self, address: str) -> int:
        ...

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        ...

    def credit(self, address: str, amount: int) -> None:
        ...


@dataclass(frozen=True)
class TransferRecord:
    sender: str
    recipient: str
    amount: int


class InMemoryTokenLedger:
    """
    Integer-denominated ledger held in process memory.

    Transfers are all-or-nothing: either both balances move or neither does.
    """

    def __init__(self, initial_balances: Dict[str, int] | None = None):
        self._balances: Dict[str, int] = {}
        self._lock = threading.RLock()
        self.transfers: List[TransferRecord] = []
        for address, amount in (initial_balances or {}).items():
            self.credit(address, amount)

    @staticmethod
    def _validate_amount(amount: int) -> int:
        if not isinstance(amount, int) or isinstance(amount, bool):
            raise LedgerError("Amount must be an integer number of base units.")
        if amount < 0:
            raise LedgerError("Amount cannot be negative.", details={"amount": amount})
        return amount

    def balance_of(self, address: str) -> int:
        with self._lock:
            return self._balances.get(address, 0)

    def credit(self, address: str, amount: int) -> None:
        """Records tokens arriving at ``address`` from outside the ledger."""
        if not address:
            raise LedgerError("Address cannot be empty.")
        amount = self._validate_amount(amount)
        with self._lock:
            self._balances[address] = self._balances.get(address, 0) + amount
        logger.info(
            "Credited %d tokens to %s",
            amount,
            address,
            extra={"event": "ledger.credit", "address": address, "amount": amount},
        )

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        """
        Moves ``amount`` from sender to recipient.

        Returns:
            True on success, False if the sender's balance is insufficient.

        Raises:
            LedgerError: malformed addresses or amount
        """
        if not sender or not recipient:
            raise LedgerError("Sender and recipient addresses are required.")
        amount = self._validate_amount(amount)
        with self._lock:
            available = self._balances.get(sender, 0)
            if available < amount:
                logger.warning(
                    "Transfer rejected: insufficient balance",
                    extra={
                        "event": "ledger.transfer_rejected",
                        "sender": sender,
                        "amount": amount,
                        "available": available,
                    },
                )
                return False
            self._balances[sender] = available - amount
            self._balances[recipient] = self._balances.get(recipient, 0) + amount
            self.transfers.append(TransferRecord(sender, recipient, amount))
        logger.info(
            "Transferred %d tokens from %s to %s",
            amount,
            sender,
            recipient,
            extra={"event": "ledger.transfer", "sender": sender, "recipient": recipient, "amount": amount},
        )
        return True
