"""
Points Ledger

Holds every grant recorded for the ledger and exposes add, spend and
balance queries. Spending is delegated to SpendAllocator.
"""

import threading
import uuid
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from Config.constants_core import LEDGER_LOGGER_NAME
from Shared_Utils.logger import StructuredLogger, get_logger, log_context
from .allocator import SpendAllocator
from .exceptions import InsufficientBalanceError, InvalidGrantError
from .models import Grant, SpendReportEntry, Timestamp, sum_points


GRANT_RECORD_KEYS = ('payer', 'points', 'timestamp')


class Ledger:
    """
    Ledger of payer point grants.

    Core Principles:
    - Grants are kept in insertion order and never deleted
    - A fully spent grant stays in the ledger with zero points
    - A spend either fails up front (nothing changes) or runs to completion
    - Every public operation runs under one re-entrant lock

    Usage:
        ledger = Ledger()
        ledger.add_grant('DANNON', 300, '2020-10-31T10:00:00Z')
        ledger.add_grant('UNILEVER', 200, '2020-10-31T11:00:00Z')
        report = ledger.spend(400)
        balances = ledger.payer_balances()
    """

    def __init__(
        self,
        allocator: Optional[SpendAllocator] = None,
        logger: Optional[StructuredLogger] = None
    ):
        """
        Initialize an empty ledger.

        Args:
            allocator: Spend allocator (optional, a default one is created)
            logger: Structured logger (optional, uses the 'points_ledger' logger)
        """
        self._grants: List[Grant] = []
        self._lock = threading.RLock()
        self._allocator = allocator or SpendAllocator()
        self.logger = logger or get_logger(LEDGER_LOGGER_NAME, context={'component': 'ledger'})

    # =========================================================================
    # GRANTS
    # =========================================================================

    def add_grant(self, payer: str, points: int, timestamp: Timestamp) -> Grant:
        """
        Record points contributed by a payer.

        Points may be negative (an adjustment against earlier grants).
        Timestamps may be datetimes or ISO-8601 strings.

        Returns:
            The stored Grant
        """
        grant = Grant(payer=payer, points=points, timestamp=timestamp)
        with self._lock:
            self._grants.append(grant)
        self.logger.grant(f"Recorded {grant}", extra={'payer': grant.payer})
        return grant

    def add_grants(self, records: Iterable[Mapping[str, Any]]) -> List[Grant]:
        """
        Record several grants from mappings with payer, points and timestamp keys.

        All records are validated before any is stored: one bad record
        leaves the ledger unchanged.

        Raises:
            InvalidGrantError: a record is missing a key or fails validation
        """
        grants = []
        for record in records:
            for key in GRANT_RECORD_KEYS:
                if key not in record:
                    raise InvalidGrantError(key, None, "missing")
            grants.append(Grant(payer=record['payer'], points=record['points'], timestamp=record['timestamp']))

        with self._lock:
            self._grants.extend(grants)

        for grant in grants:
            self.logger.grant(f"Recorded {grant}", extra={'payer': grant.payer})
        return grants

    @property
    def grants(self) -> Tuple[Grant, ...]:
        """Snapshot of the grants in insertion order."""
        with self._lock:
            return tuple(self._grants)

    def __len__(self) -> int:
        with self._lock:
            return len(self._grants)

    def __iter__(self) -> Iterator[Grant]:
        return iter(self.grants)

    # =========================================================================
    # BALANCES
    # =========================================================================

    def total_balance(self) -> int:
        """Sum of remaining points across all grants."""
        with self._lock:
            return sum_points(self._grants)

    def payer_balance(self, payer: str) -> int:
        """Remaining points for one payer; 0 for a payer with no grants."""
        with self._lock:
            return sum_points(self._grants, payer)

    def payer_balances(self) -> Dict[str, int]:
        """Remaining points per payer, keyed in order of first appearance."""
        balances: Dict[str, int] = {}
        with self._lock:
            for grant in self._grants:
                balances[grant.payer] = balances.get(grant.payer, 0) + grant.points
        return balances

    # =========================================================================
    # SPEND
    # =========================================================================

    def spend(self, points: int) -> List[SpendReportEntry]:
        """
        Spend points across payers, oldest grants first.

        Args:
            points: Amount to spend; zero or negative is a no-op

        Returns:
            One SpendReportEntry per payer touched, deltas negative

        Raises:
            InsufficientBalanceError: points exceeds the total balance.
                The ledger is not modified.
        """
        if points <= 0:
            self.logger.debug(f"Ignoring spend of {points} points")
            return []

        with self._lock:
            available = sum_points(self._grants)
            if points > available:
                self.logger.warning(
                    f"❌ Spend of {points} points rejected: {available} available",
                    extra={'requested': points, 'available': available}
                )
                raise InsufficientBalanceError(points, available)

            with log_context(spend_id=uuid.uuid4().hex[:12]):
                self.logger.spend(f"Spending {points} of {available} points")

                report = self._allocator.allocate(self._grants, points)

                deducted = -sum(entry.delta for entry in report)
                self.logger.spend(
                    f"✅ Spent {deducted} points across {len(report)} payers",
                    extra={'requested': points, 'deducted': deducted}
                )

        return report
