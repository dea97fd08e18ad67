"""
Configuration package for the points ledger.

Provides centralized access to constants and environment configuration.

Usage:
    from Config import constants_core as core
    print(core.LEDGER_LOGGER_NAME)

    from Config.environment import env
    print(f"Running in {env.env_name} mode")
"""

# Auto-load environment on package import
from Config.environment import env

from Config import constants_core

__all__ = [
    'env',
    'constants_core',
]
