"""
Spend Allocator

Spends points across a ledger's grants oldest-first, never taking a grant
that would leave its payer with a negative total.
"""

from typing import Dict, List, Optional

from Config.constants_core import ALLOCATOR_LOGGER_NAME
from Shared_Utils.logger import StructuredLogger, get_logger
from .models import Grant, SpendReportEntry, sum_points


class SpendAllocator:
    """
    Oldest-first spend allocation.

    Core Principles:
    - Grants are consumed in timestamp order; equal timestamps keep
      insertion order
    - A grant larger than the outstanding amount is partially consumed and
      allocation stops there
    - A grant is skipped when taking all of it would push its payer's
      total below zero
    - The report holds one entry per payer, in first-touched order

    The allocator keeps no state between calls. It works on the ledger's
    own grant list and mutates ``Grant.points`` in place, but never
    reorders that list.

    Usage:
        allocator = SpendAllocator()
        report = allocator.allocate(grants, points=5000)
    """

    def __init__(self, logger: Optional[StructuredLogger] = None):
        self.logger = logger or get_logger(ALLOCATOR_LOGGER_NAME, context={'component': 'allocator'})

    def allocate(self, grants: List[Grant], points: int) -> List[SpendReportEntry]:
        """
        Spend ``points`` across ``grants``.

        Args:
            grants: The ledger's grant list (mutated in place, order kept)
            points: Amount to spend, already checked against the total balance

        Returns:
            One SpendReportEntry per payer touched, deltas negative
        """
        report: List[SpendReportEntry] = []
        entries: Dict[str, SpendReportEntry] = {}

        # sorted() is stable, so equal timestamps keep insertion order
        for grant in sorted(grants, key=lambda g: g.timestamp):
            if points <= 0:
                break
            if grant.is_consumed:
                continue

            projected = sum_points(grants, grant.payer) - grant.points
            if projected < 0:
                self.logger.debug(
                    f"Skipping {grant}: payer total would drop to {projected}",
                    extra={'payer': grant.payer}
                )
                continue

            if grant.points > points:
                grant.points -= points
                self._debit(report, entries, grant.payer, points)
                self.logger.debug(
                    f"Partially consumed {grant}: took {points}",
                    extra={'payer': grant.payer}
                )
                points = 0
                break

            taken = grant.points
            points -= taken
            self._debit(report, entries, grant.payer, taken)
            grant.points = 0
            self.logger.debug(
                f"Fully consumed {grant}: took {taken}",
                extra={'payer': grant.payer}
            )

        if points > 0:
            # Total balance covered the request but guarded grants did not
            self.logger.warning(
                f"⚠️  Spend under-satisfied by {points} points after payer guard skips",
                extra={'unallocated': points}
            )

        return report

    @staticmethod
    def _debit(
        report: List[SpendReportEntry],
        entries: Dict[str, SpendReportEntry],
        payer: str,
        amount: int
    ) -> None:
        """Subtract ``amount`` from the payer's entry, creating it on first touch."""
        entry = entries.get(payer)
        if entry is None:
            entry = SpendReportEntry(payer=payer, delta=0)
            entries[payer] = entry
            report.append(entry)
        entry.delta -= amount
