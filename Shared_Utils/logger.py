"""
Structured Logger for the points ledger

Provides:
- Context injection (spend_id, payer, component)
- Performance tracking decorator
- Custom ledger log levels (GRANT, SPEND)
- Context-local context management

Usage:
    # Basic logging
    logger = get_logger('points_ledger')
    logger.info('Ledger created')

    # With context
    logger = get_logger('points_ledger', context={'component': 'ledger'})
    logger.grant('Grant recorded', extra={'payer': 'DANNON'})

    # Temporary context
    with log_context(spend_id='abc123'):
        logger.spend('Spend allocated')
"""

import functools
import logging
import time
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Callable, Dict, Optional

from Config.logging_config import LoggingConfig, get_logging_config, LEDGER_LOG_LEVELS


_log_context: ContextVar[Dict[str, Any]] = ContextVar('log_context', default={})


class StructuredLogger(logging.LoggerAdapter):
    """
    Logger adapter with context injection and ledger level methods.

    Context is merged from three sources, later ones winning:
    the context-local context, the adapter's default context and the
    per-call ``extra``.
    """

    def __init__(self, logger: logging.Logger, extra: Optional[Dict[str, Any]] = None):
        super().__init__(logger, extra or {})

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        context = {}

        context.update(_log_context.get())

        if self.extra:
            context.update(self.extra)

        if 'extra' in kwargs:
            context.update(kwargs.pop('extra'))

        if context:
            kwargs['extra'] = {'context': context}

        return msg, kwargs

    # ========================================================================
    # Ledger Log Levels
    # ========================================================================

    def grant(self, msg: str, *args, **kwargs) -> None:
        """Log GRANT level message."""
        kwargs.setdefault('stacklevel', 2)
        self.log(LEDGER_LOG_LEVELS['GRANT'], msg, *args, **kwargs)

    def spend(self, msg: str, *args, **kwargs) -> None:
        """Log SPEND level message."""
        kwargs.setdefault('stacklevel', 2)
        self.log(LEDGER_LOG_LEVELS['SPEND'], msg, *args, **kwargs)


# ============================================================================
# Logger Factory
# ============================================================================

_loggers: Dict[str, StructuredLogger] = {}


def get_logger(
    name: str,
    context: Optional[Dict[str, Any]] = None,
    config: Optional[LoggingConfig] = None,
) -> StructuredLogger:
    """
    Get or create a structured logger.

    Args:
        name: Logger name (e.g., 'points_ledger', 'points_allocator')
        context: Optional default context (component, ledger_id, etc.)
        config: Optional custom logging config (uses default if not provided)

    Returns:
        StructuredLogger instance

    Examples:
        >>> logger = get_logger('points_ledger')
        >>> logger.info('Ledger created')

        >>> logger = get_logger('points_ledger', context={'component': 'ledger'})
        >>> logger.info('Spend requested', extra={'requested': 500})
    """
    cache_key = f"{name}:{sorted((context or {}).items())!r}"

    if cache_key not in _loggers or config is not None:
        log_config = config or get_logging_config()
        base_logger = log_config.configure_logger(logger_name=name)
        _loggers[cache_key] = StructuredLogger(base_logger, extra=context)

    return _loggers[cache_key]


def reset_loggers() -> None:
    """Drop cached adapters so the next get_logger() picks up a new config."""
    _loggers.clear()


# ============================================================================
# Context Management
# ============================================================================

def set_context(**context) -> None:
    """
    Set context-local logging context.

    Examples:
        >>> set_context(spend_id='abc123')
        >>> logger.info('Spend allocated')  # Includes spend_id
    """
    current = _log_context.get().copy()
    current.update(context)
    _log_context.set(current)


def clear_context() -> None:
    """Clear context-local logging context."""
    _log_context.set({})


def get_context() -> Dict[str, Any]:
    """Get a copy of the current logging context."""
    return _log_context.get().copy()


@contextmanager
def log_context(**context):
    """
    Context manager for temporary logging context.

    Examples:
        >>> with log_context(spend_id='abc123'):
        ...     logger.info('Allocating')  # Includes spend_id
        >>> logger.info('Done')  # No spend_id
    """
    previous = get_context()
    set_context(**context)

    try:
        yield
    finally:
        _log_context.set(previous)


# ============================================================================
# Performance Tracking
# ============================================================================

def log_performance(logger_name: str, level: str = 'DEBUG') -> Callable:
    """
    Decorator to log function execution time.

    Args:
        logger_name: Name of logger to use
        level: Log level (default: DEBUG)

    Examples:
        >>> @log_performance('points_validator')
        ... def validate(ledger):
        ...     return True
    """
    def decorator(func: Callable) -> Callable:
        log_level = getattr(logging, level.upper(), logging.DEBUG)

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            logger = get_logger(logger_name)
            start_time = time.perf_counter()
            func_name = func.__name__

            try:
                result = func(*args, **kwargs)
            except Exception:
                elapsed = time.perf_counter() - start_time
                logger.error(
                    f"{func_name} failed",
                    exc_info=True,
                    extra={'duration_ms': round(elapsed * 1000, 2)}
                )
                raise

            elapsed = time.perf_counter() - start_time
            logger.log(
                log_level,
                f"{func_name} completed",
                extra={'duration_ms': round(elapsed * 1000, 2)}
            )
            return result

        return wrapper

    return decorator


# ============================================================================
# Setup Helper
# ============================================================================

def setup_structured_logging(
    log_dir: Optional[str] = None,
    console_level: Optional[str] = None,
    use_json: Optional[bool] = None,
) -> LoggingConfig:
    """
    Initialize structured logging system.

    Args:
        log_dir: Directory for log files (None = console only)
        console_level: Console log level
        use_json: Force JSON formatting

    Returns:
        LoggingConfig instance

    Examples:
        >>> config = setup_structured_logging(log_dir='logs', console_level='DEBUG')
        >>> logger = get_logger('points_ledger')
    """
    from Config.logging_config import set_logging_config

    config = LoggingConfig(
        log_dir=log_dir,
        console_level=console_level,
        use_json=use_json,
    )

    set_logging_config(config)
    reset_loggers()
    return config


__all__ = [
    'StructuredLogger',
    'get_logger',
    'reset_loggers',
    'set_context',
    'clear_context',
    'get_context',
    'log_context',
    'log_performance',
    'setup_structured_logging',
]
