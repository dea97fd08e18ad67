"""
Exceptions raised by the points ledger.
"""

from typing import Any


class LedgerError(Exception):
    """Base exception for all ledger errors."""
    pass


class InsufficientBalanceError(LedgerError):
    """Raised when a spend asks for more points than the ledger holds.

    The ledger is left untouched.
    """

    def __init__(self, requested: int, available: int):
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient balance: requested {requested} points, {available} available"
        )


class InvalidGrantError(LedgerError):
    """Raised when a grant record cannot be built from the given values."""

    def __init__(self, field: str, value: Any, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid grant: {field}={value!r}\n  Reason: {reason}")
