"""
Shared test fixtures

The ledger loggers do not propagate by default. Tests run with a logging
config that does, so pytest's caplog receives their records.
"""

import pytest

from Config import logging_config
from Config.logging_config import LoggingConfig
from Shared_Utils.logger import reset_loggers


@pytest.fixture(autouse=True)
def propagating_logging(monkeypatch):
    """Default logging config whose loggers propagate to the root logger"""
    monkeypatch.setattr(logging_config, '_default_config', LoggingConfig(propagate=True))
    reset_loggers()
    yield
    reset_loggers()
