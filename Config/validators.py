# Config/validators.py
"""
Configuration validation for the points ledger.

Validates environment-driven settings (environment name, log level, JSON flag)
before logging is configured.

Usage:
    from Config.validators import validate_environment

    # At startup
    validate_environment()  # Raises ConfigError if invalid

    # Or get a validation report
    result = validate_environment(raise_on_error=False)
    if not result:
        print(result.format_report())
"""

from __future__ import annotations
from typing import Any, Optional, List, Tuple

from .constants_core import KNOWN_ENVIRONMENTS, LOG_LEVELS
from .environment import Environment, env as default_env, parse_bool
from .exceptions import ConfigValidationError, ConfigTypeError


# ============================================================================
# Validation Rule System
# ============================================================================

class ValidationRule:
    """Base class for validation rules."""

    def __init__(self, key: str, description: str):
        self.key = key
        self.description = description

    def validate(self, value: Any) -> Optional[str]:
        """
        Validate a value.

        Returns:
            None if valid
            Error message string if invalid
        """
        raise NotImplementedError


class TypeRule(ValidationRule):
    """Validates value is correct type."""

    def __init__(self, key: str, expected_type: type, description: str = ""):
        super().__init__(key, description or f"Must be {expected_type.__name__}")
        self.expected_type = expected_type

    def validate(self, value: Any) -> Optional[str]:
        if not isinstance(value, self.expected_type):
            return f"Expected {self.expected_type.__name__}, got {type(value).__name__}"
        return None


class ChoiceRule(ValidationRule):
    """Validates value is one of allowed choices."""

    def __init__(self, key: str, choices: List[Any], description: str = ""):
        self.choices = list(choices)
        desc = description or f"Must be one of: {', '.join(str(c) for c in self.choices)}"
        super().__init__(key, desc)

    def validate(self, value: Any) -> Optional[str]:
        if value not in self.choices:
            return f"Must be one of {self.choices}, got {value!r}"
        return None


class BoolFlagRule(ValidationRule):
    """Validates a raw env string parses as a boolean flag (or is unset)."""

    def validate(self, value: Any) -> Optional[str]:
        try:
            parse_bool(value)
        except ValueError as e:
            return str(e)
        return None


# ============================================================================
# Environment Rules
# ============================================================================

ENVIRONMENT_RULES = [
    TypeRule("env_name", str, "Runtime environment name"),
    ChoiceRule("env_name", KNOWN_ENVIRONMENTS),

    TypeRule("log_level", str, "Console log level"),
    ChoiceRule("log_level", LOG_LEVELS),

    BoolFlagRule("log_json", "LOG_JSON must be a boolean flag"),
]


# ============================================================================
# Validation Engine
# ============================================================================

class ValidationResult:
    """Result of validation check."""

    def __init__(self):
        self.errors: List[Tuple[str, str]] = []  # (key, error_message)
        self.failed_rules: List[ValidationRule] = []

    def add_error(self, key: str, message: str, rule: Optional[ValidationRule] = None):
        self.errors.append((key, message))
        if rule is not None:
            self.failed_rules.append(rule)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def __bool__(self) -> bool:
        return self.is_valid

    def format_report(self) -> str:
        """Format validation result as human-readable report."""
        if not self.errors:
            return "All validation checks passed"

        lines = ["VALIDATION ERRORS:"]
        for key, msg in self.errors:
            lines.append(f"  {key}: {msg}")
        return "\n".join(lines)


def validate_config_dict(values: dict, rules: List[ValidationRule]) -> ValidationResult:
    """Apply rules to a dict of values; missing keys are skipped."""
    result = ValidationResult()
    for rule in rules:
        if rule.key not in values:
            continue
        error = rule.validate(values[rule.key])
        if error:
            result.add_error(rule.key, error, rule)
    return result


def validate_environment(
        environment: Optional[Environment] = None,
        raise_on_error: bool = True,
) -> ValidationResult:
    """
    Validate the runtime environment settings.

    Args:
        environment: Environment to check (default: the global instance)
        raise_on_error: Raise the first failure instead of returning a report

    Returns:
        ValidationResult with all failures
    """
    environment = environment or default_env
    values = environment.as_dict()
    result = validate_config_dict(values, ENVIRONMENT_RULES)

    if raise_on_error and result.errors:
        key, message = result.errors[0]
        rule = result.failed_rules[0]
        if isinstance(rule, TypeRule):
            raise ConfigTypeError(key, values[key], rule.expected_type)
        raise ConfigValidationError(key, values[key], message, rule.description)

    return result
