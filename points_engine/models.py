"""
Data models for the points ledger.

Defines the grant record, the per-payer spend report entry and the
validation result used by the ledger validator.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Union

from dateutil import parser as dateparser

from .exceptions import InvalidGrantError


Timestamp = Union[datetime, str]


def parse_timestamp(value: Timestamp) -> datetime:
    """
    Coerce an ISO-8601 string to a datetime.

    Timestamps without an offset are taken as UTC so every grant in a
    ledger stays comparable with every other.
    """
    if isinstance(value, str):
        try:
            value = dateparser.isoparse(value)
        except ValueError as e:
            raise InvalidGrantError('timestamp', value, f"Not an ISO-8601 timestamp: {e}") from e
    elif not isinstance(value, datetime):
        raise InvalidGrantError('timestamp', value, f"Expected datetime or ISO string, got {type(value).__name__}")

    if value.tzinfo is None or value.utcoffset() is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass
class Grant:
    """
    Points contributed by a payer at a point in time.

    ``points`` is the remaining amount. Only the spend allocator changes it,
    and never below zero. ``original_points`` keeps the amount as recorded.
    """

    payer: str
    points: int
    timestamp: datetime
    original_points: int = field(init=False)

    def __post_init__(self):
        if not isinstance(self.payer, str) or not self.payer.strip():
            raise InvalidGrantError('payer', self.payer, "Payer must be a non-empty string")
        if isinstance(self.points, bool) or not isinstance(self.points, int):
            raise InvalidGrantError('points', self.points, f"Expected int, got {type(self.points).__name__}")
        self.timestamp = parse_timestamp(self.timestamp)
        self.original_points = self.points

    @property
    def is_consumed(self) -> bool:
        return self.points == 0

    @property
    def consumed(self) -> int:
        """Points taken from this grant so far."""
        return self.original_points - self.points

    def to_dict(self) -> Dict[str, Any]:
        return {
            'payer': self.payer,
            'points': self.points,
            'original_points': self.original_points,
            'timestamp': self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        return f"Grant({self.payer}: {self.points}/{self.original_points} @ {self.timestamp.isoformat()})"


@dataclass
class SpendReportEntry:
    """Points deducted from one payer during a single spend call."""

    payer: str
    delta: int

    def to_dict(self) -> Dict[str, Any]:
        return {'payer': self.payer, 'points': self.delta}

    def __str__(self) -> str:
        return f"SpendReportEntry({self.payer}: {self.delta})"


def sum_points(grants: Iterable[Grant], payer: Optional[str] = None) -> int:
    """Sum remaining points, optionally for a single payer."""
    total = 0
    for grant in grants:
        if payer is None or grant.payer == payer:
            total += grant.points
    return total


@dataclass
class ValidationResult:
    """
    Result of ledger validation.

    Contains validation checks and any discrepancies found.
    """

    is_valid: bool

    # Validation checks
    total_grants: int = 0
    total_payers: int = 0
    consumed_grants: int = 0
    adjustment_grants: int = 0

    # Discrepancies
    over_consumed_grants: int = 0
    negative_grants: int = 0
    negative_payers: int = 0
    balance_mismatch: Optional[int] = None

    error_messages: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Check if validation found errors."""
        return not self.is_valid or len(self.error_messages) > 0

    @property
    def has_warnings(self) -> bool:
        return len(self.warnings) > 0

    @property
    def has_discrepancies(self) -> bool:
        return (
            self.over_consumed_grants > 0 or
            self.negative_grants > 0 or
            self.negative_payers > 0 or
            bool(self.balance_mismatch)
        )

    def add_error(self, message: str):
        self.error_messages.append(message)
        self.is_valid = False

    def add_warning(self, message: str):
        self.warnings.append(message)

    def __str__(self) -> str:
        status = "✅ VALID" if self.is_valid else "❌ INVALID"

        parts = [
            f"ValidationResult({status})",
            f"  Grants: {self.total_grants} (Consumed: {self.consumed_grants}, "
            f"Adjustments: {self.adjustment_grants})",
            f"  Payers: {self.total_payers}",
        ]

        if self.has_discrepancies:
            parts.append("  ⚠️  Discrepancies found:")
            if self.over_consumed_grants > 0:
                parts.append(f"    - Over-consumed grants: {self.over_consumed_grants}")
            if self.negative_grants > 0:
                parts.append(f"    - Negative grants: {self.negative_grants}")
            if self.negative_payers > 0:
                parts.append(f"    - Negative payer balances: {self.negative_payers}")
            if self.balance_mismatch:
                parts.append(f"    - Balance mismatch: {self.balance_mismatch}")

        if self.error_messages:
            parts.append(f"  ❌ Errors: {len(self.error_messages)}")
            for err in self.error_messages[:3]:
                parts.append(f"    - {err}")

        if self.warnings:
            parts.append(f"  ⚠️  Warnings: {len(self.warnings)}")
            for warn in self.warnings[:3]:
                parts.append(f"    - {warn}")

        return "\n".join(parts)
