"""
Vesting-specific exception hierarchy for vestvault.

Provides typed exceptions for schedule creation, claim eligibility and
ledger interaction so callers can react to each failure kind precisely.
"""

from __future__ import annotations
from typing import Optional, Any, Dict


class VestingError(Exception):
    """Base exception for all vesting engine errors.

    Attributes:
        message: Human-readable error description
        details: Additional context about the error
        recoverable: Whether the caller may retry the operation later
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


class ConfigurationError(VestingError):
    """Raised when required configuration is missing or invalid."""
    pass


# ==================== Creation Errors ====================


class ScheduleValidationError(VestingError):
    """Raised when schedule parameters fail validation at creation time."""
    pass


class ZeroDurationError(ScheduleValidationError):
    """Raised when a schedule has no vesting duration.

    A zero duration would divide by zero in the release calculation, so it
    is rejected when the schedule is created.
    """
    pass


class InputLengthMismatchError(ScheduleValidationError):
    """Raised when batch construction inputs have different lengths."""

    def __init__(self, message: str, lengths: Optional[Dict[str, int]] = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.lengths = lengths or {}
        self.details.setdefault("lengths", self.lengths)


# ==================== Access Errors ====================


class UnauthorizedError(VestingError):
    """Raised when the caller lacks the privilege for a mutating operation."""
    pass


# ==================== Claim Errors ====================


class ClaimError(VestingError):
    """Base class for claim eligibility failures."""
    pass


class NoTokensAvailableError(ClaimError):
    """Raised when the engine holds no tokens on the ledger."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        kwargs.setdefault("recoverable", True)
        super().__init__(message, **kwargs)


class InvalidScheduleIndexError(ClaimError):
    """Raised when a schedule index does not reference a stored schedule."""

    def __init__(self, message: str, index: Optional[int] = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.index = index


class VestingCompletedError(ClaimError):
    """Raised when the schedule has already released its whole allocation."""
    pass


class ClaimTooSoonError(ClaimError):
    """Raised when less than one full day has passed since the last claim."""

    def __init__(
        self,
        message: str,
        next_claim_time: Optional[int] = None,
        **kwargs: Any,
    ) -> None:
        kwargs.setdefault("recoverable", True)
        super().__init__(message, **kwargs)
        self.next_claim_time = next_claim_time


# ==================== Ledger Errors ====================


class LedgerError(VestingError):
    """Raised by the token ledger for malformed requests."""
    pass


class LedgerTransferError(VestingError):
    """Raised when the ledger rejects or fails a transfer instructed by the engine."""
    pass
