"""
Points Ledger Engine

This module tracks point grants contributed by payers and spends points
across them oldest-first.

Key Components:
- Ledger: Records grants, answers balance queries, spends points
- SpendAllocator: Oldest-first allocation with a per-payer negative guard
- LedgerValidator: Validates ledger invariants
- Models: Grant, SpendReportEntry, ValidationResult

Architecture:
- Grants are facts; only their remaining points change
- Spends consume the oldest grants first, partially consuming the last one
- A spend that exceeds the total balance fails before anything changes
- Each spend returns one negative delta per payer it touched

Usage:
    from points_engine import Ledger

    ledger = Ledger()
    ledger.add_grant('DANNON', 1000, '2020-11-02T14:00:00Z')
    report = ledger.spend(500)
"""

from .allocator import SpendAllocator
from .exceptions import InsufficientBalanceError, InvalidGrantError, LedgerError
from .ledger import Ledger
from .models import Grant, SpendReportEntry, ValidationResult
from .validator import LedgerValidator

__all__ = [
    'Ledger',
    'SpendAllocator',
    'LedgerValidator',
    'Grant',
    'SpendReportEntry',
    'ValidationResult',
    'LedgerError',
    'InsufficientBalanceError',
    'InvalidGrantError',
]

__version__ = '1.0.0'
