"""
Critical Path Test Fixtures

Shared fixtures for points-critical path testing.
These fixtures provide minimal, fast setup for critical tests.
"""

import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

from points_engine import Ledger, SpendAllocator


@pytest.fixture
def base_time():
    """Reference timestamp for ordering grants"""
    return datetime(2020, 10, 31, 10, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def timestamps(base_time):
    """Five strictly increasing timestamps, one hour apart"""
    return [base_time + timedelta(hours=i) for i in range(5)]


@pytest.fixture
def mock_logger():
    """Mock structured logger"""
    logger = MagicMock()
    logger.info = MagicMock()
    logger.warning = MagicMock()
    logger.error = MagicMock()
    logger.debug = MagicMock()
    logger.grant = MagicMock()
    logger.spend = MagicMock()
    return logger


@pytest.fixture
def ledger():
    """Empty ledger"""
    return Ledger()


@pytest.fixture
def quiet_ledger(mock_logger):
    """Empty ledger whose ledger and allocator logs go to a mock"""
    return Ledger(allocator=SpendAllocator(logger=mock_logger), logger=mock_logger)


@pytest.fixture
def sample_transactions():
    """Canonical multi-payer grant records, deliberately out of order"""
    return [
        {"payer": "DANNON", "points": 1000, "timestamp": "2020-11-02T14:00:00Z"},
        {"payer": "UNILEVER", "points": 200, "timestamp": "2020-10-31T11:00:00Z"},
        {"payer": "DANNON", "points": -200, "timestamp": "2020-10-31T15:00:00Z"},
        {"payer": "MILLER COORS", "points": 10000, "timestamp": "2020-11-01T14:00:00Z"},
        {"payer": "DANNON", "points": 300, "timestamp": "2020-10-31T10:00:00Z"},
    ]


@pytest.fixture
def sample_ledger(ledger, sample_transactions):
    """Ledger loaded with the canonical grant records"""
    ledger.add_grants(sample_transactions)
    return ledger


@pytest.fixture
def generate_grants():
    """Factory for interleaved non-negative grant records"""
    def _generate(payers=("A", "B", "C"), per_payer=3, points=100, start=None):
        start = start or datetime(2021, 1, 1, tzinfo=timezone.utc)
        records = []
        step = 0
        for _ in range(per_payer):
            for payer in payers:
                records.append({
                    "payer": payer,
                    "points": points,
                    "timestamp": start + timedelta(minutes=step),
                })
                step += 1
        return records

    return _generate
