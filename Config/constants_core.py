"""
Core system constants shared across all modules.

These define fundamental ledger and logging behavior and rarely change.
"""

# ============================================================================
# Environments
# ============================================================================

DEFAULT_ENV_NAME = 'dev'

KNOWN_ENVIRONMENTS = ('dev', 'test', 'staging', 'prod')

JSON_LOG_ENVIRONMENTS = ('staging', 'prod')
"""Environments where console logs are emitted as JSON"""

# ============================================================================
# Logging
# ============================================================================

LEDGER_LOGGER_NAME = 'points_ledger'
ALLOCATOR_LOGGER_NAME = 'points_allocator'
VALIDATOR_LOGGER_NAME = 'points_validator'

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')

DEFAULT_LOG_LEVEL = 'INFO'

DEFAULT_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s (%(filename)s:%(lineno)d)'

DEFAULT_LOG_DATEFMT = '%Y-%m-%d %H:%M:%S'

LOG_MAX_BYTES = 50 * 1024 * 1024
"""Rotate ledger log files at 50MB"""

LOG_BACKUP_COUNT = 5

# ============================================================================
# Ledger log levels
# ============================================================================

GRANT_LEVEL_NUM = 21
"""Grant recorded in the ledger"""

SPEND_LEVEL_NUM = 23
"""Spend request allocated across payers"""
