"""
Ledger Validator

Checks ledger invariants after any sequence of grants and spends.
"""

from typing import Optional

from Config.constants_core import VALIDATOR_LOGGER_NAME
from Shared_Utils.logger import StructuredLogger, get_logger, log_performance
from .ledger import Ledger
from .models import ValidationResult


class LedgerValidator:
    """
    Validates a ledger's grants and balances.

    Checks:
    - Non-negative grants are never consumed past zero or above their
      recorded amount
    - Adjustment (negative) grants are either untouched or absorbed to zero
    - No payer total is negative (a warning when the payer has adjustment
      grants, an error otherwise)
    - Per-payer balances add up to the total balance
    """

    def __init__(self, ledger: Ledger, logger: Optional[StructuredLogger] = None):
        self.ledger = ledger
        self.logger = logger or get_logger(VALIDATOR_LOGGER_NAME, context={'component': 'validator'})

    @log_performance(VALIDATOR_LOGGER_NAME)
    def validate(self, strict: bool = False) -> ValidationResult:
        """
        Validate the ledger.

        Args:
            strict: If True, treat warnings as errors

        Returns:
            ValidationResult with validation details
        """
        grants = self.ledger.grants
        balances = self.ledger.payer_balances()

        result = ValidationResult(
            is_valid=True,
            total_grants=len(grants),
            total_payers=len(balances),
        )

        adjusted_payers = set()
        for grant in grants:
            if grant.original_points < 0:
                result.adjustment_grants += 1
                adjusted_payers.add(grant.payer)
                if grant.points not in (grant.original_points, 0):
                    result.negative_grants += 1
                    result.add_error(f"Adjustment {grant} partially applied")
                continue

            if grant.is_consumed and grant.original_points > 0:
                result.consumed_grants += 1
            if grant.points < 0:
                result.negative_grants += 1
                result.add_error(f"{grant} is below zero")
            elif grant.points > grant.original_points:
                result.over_consumed_grants += 1
                result.add_error(f"{grant} holds more than was granted")

        for payer, balance in balances.items():
            if balance >= 0:
                continue
            result.negative_payers += 1
            message = f"Payer {payer} balance is {balance}"
            if payer in adjusted_payers:
                result.add_warning(f"{message} (adjustment grants exceed earned points)")
            else:
                result.add_error(message)

        total = self.ledger.total_balance()
        mismatch = total - sum(balances.values())
        if mismatch:
            result.balance_mismatch = mismatch
            result.add_error(f"Payer balances differ from total balance {total} by {mismatch}")

        if result.has_errors:
            result.is_valid = False
            self.logger.error("❌ Ledger validation FAILED")
        elif result.has_warnings and strict:
            result.is_valid = False
            self.logger.warning("⚠️  Ledger validation FAILED (strict mode)")
        else:
            self.logger.info("✅ Ledger validation PASSED")

        return result
