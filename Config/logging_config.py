"""
Structured Logging Configuration for the points ledger

This module provides centralized logging configuration with:
- JSON formatting for production environments
- Colored console output for development
- Size-based log rotation (50MB max) when a log directory is configured
- Context injection (spend_id, payer, component)
- Custom log levels for ledger operations
"""

import json
import logging
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional, Union

from Config.constants_core import (
    DEFAULT_LOG_DATEFMT,
    DEFAULT_LOG_FORMAT,
    GRANT_LEVEL_NUM,
    LOG_BACKUP_COUNT,
    LOG_MAX_BYTES,
    SPEND_LEVEL_NUM,
)
from Config.environment import env
from Config.validators import validate_environment


# Custom log levels for ledger operations
LEDGER_LOG_LEVELS = {
    'GRANT': GRANT_LEVEL_NUM,
    'SPEND': SPEND_LEVEL_NUM,
}

# Register custom log levels
for level_name, level_num in LEDGER_LOG_LEVELS.items():
    logging.addLevelName(level_num, level_name)


_RESERVED_ATTRS = frozenset([
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'message', 'pathname', 'process', 'processName',
    'relativeCreated', 'thread', 'threadName', 'taskName', 'exc_info',
    'exc_text', 'stack_info', 'context',
])


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging in production.

    Outputs log records as JSON with consistent structure:
    {
        "timestamp": "2026-10-18T10:30:45.123456+00:00",
        "level": "SPEND",
        "logger": "points_ledger",
        "message": "Spend allocated",
        "context": {
            "spend_id": "5c1e...",
            "component": "ledger"
        },
        "extra": {...},
        "exc_info": "..."
    }
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON string."""
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        if hasattr(record, 'context'):
            log_data['context'] = record.context

        extra_fields = {
            key: value for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS
        }
        if extra_fields:
            log_data['extra'] = extra_fields

        if record.exc_info:
            log_data['exc_info'] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class ColoredConsoleFormatter(logging.Formatter):
    """
    Colored console formatter for development environments.
    Uses ANSI color codes for better readability.
    """

    COLORS = {
        'DEBUG': '\x1b[38;21m',      # Grey
        'INFO': '\x1b[38;21m',       # Grey
        'WARNING': '\x1b[38;5;214m', # Orange
        'ERROR': '\x1b[31;21m',      # Red
        'CRITICAL': '\x1b[31;1m',    # Bold Red
        'GRANT': '\x1b[34;21m',      # Blue
        'SPEND': '\x1b[32;21m',      # Green
    }
    RESET = '\x1b[0m'

    def __init__(self, include_context: bool = True):
        """
        Initialize formatter.

        Args:
            include_context: Whether to include context fields in output
        """
        self.include_context = include_context
        super().__init__(DEFAULT_LOG_FORMAT, datefmt=DEFAULT_LOG_DATEFMT)

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with color codes."""
        levelname = record.levelname
        msg = record.msg
        if levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.RESET}"
            record.msg = f"{self.COLORS[levelname]}{record.msg}{self.RESET}"

        try:
            formatted = super().format(record)
        finally:
            record.levelname = levelname
            record.msg = msg

        if self.include_context and getattr(record, 'context', None):
            context_str = ' | '.join(f"{k}={v}" for k, v in record.context.items())
            formatted += f" [{context_str}]"

        return formatted


class LoggingConfig:
    """
    Central logging configuration manager.

    Provides factory methods for creating configured loggers with:
    - Environment-aware formatting (JSON for production, colored for dev)
    - Size-based rotation when log_dir is set
    - Consistent log levels and handlers
    """

    DEFAULT_MAX_BYTES = LOG_MAX_BYTES
    DEFAULT_BACKUP_COUNT = LOG_BACKUP_COUNT

    def __init__(
        self,
        log_dir: Optional[Union[str, Path]] = None,
        max_bytes: int = DEFAULT_MAX_BYTES,
        backup_count: int = DEFAULT_BACKUP_COUNT,
        console_level: Optional[str] = None,
        file_level: str = 'DEBUG',
        use_json: Optional[bool] = None,
        propagate: bool = False,
    ):
        """
        Initialize logging configuration.

        Args:
            log_dir: Directory for log files (default: POINTS_LOG_DIR, None = console only)
            max_bytes: Max size per log file before rotation (default: 50MB)
            backup_count: Number of backup files to keep (default: 5)
            console_level: Console log level (default: LOG_LEVEL or INFO)
            file_level: File log level (default: DEBUG)
            use_json: Force JSON formatting (default: auto-detect from environment)
            propagate: Pass records on to ancestor loggers (default: False,
                the ledger loggers own their handlers)
        """
        if log_dir is None:
            log_dir = env.log_dir
        self.log_dir = Path(log_dir) if log_dir else None
        self.max_bytes = max_bytes
        self.backup_count = backup_count
        self.console_level = (console_level or env.log_level).upper()
        self.file_level = file_level.upper()
        self.use_json = env.use_json if use_json is None else use_json
        self.propagate = propagate

        if self.log_dir is not None:
            self.log_dir.mkdir(parents=True, exist_ok=True)

    def get_console_formatter(self) -> logging.Formatter:
        """Get appropriate console formatter based on environment."""
        if self.use_json:
            return JSONFormatter()
        return ColoredConsoleFormatter(include_context=True)

    def create_console_handler(self) -> logging.StreamHandler:
        """Create configured console handler."""
        handler = logging.StreamHandler()
        handler.setLevel(logging.getLevelName(self.console_level))
        handler.setFormatter(self.get_console_formatter())
        return handler

    def create_file_handler(self, log_file: str) -> RotatingFileHandler:
        """
        Create configured rotating file handler.

        Args:
            log_file: Name of the log file (e.g., 'points_ledger.log')

        Returns:
            Configured RotatingFileHandler (always JSON)
        """
        handler = RotatingFileHandler(
            self.log_dir / log_file,
            maxBytes=self.max_bytes,
            backupCount=self.backup_count,
        )
        handler.setLevel(logging.getLevelName(self.file_level))
        handler.setFormatter(JSONFormatter())
        return handler

    def configure_logger(self, logger_name: str, log_file: Optional[str] = None) -> logging.Logger:
        """
        Configure a logger with a console handler and, when a log
        directory is configured, a rotating file handler.

        Args:
            logger_name: Name of the logger
            log_file: Log file name (default: {logger_name}.log)

        Returns:
            Configured logger instance
        """
        logger = logging.getLogger(logger_name)
        logger.setLevel(logging.DEBUG)  # Capture all levels, handlers filter
        logger.propagate = self.propagate

        # Clear existing handlers to avoid duplicates
        if logger.hasHandlers():
            logger.handlers.clear()

        logger.addHandler(self.create_console_handler())

        if self.log_dir is not None:
            logger.addHandler(self.create_file_handler(log_file or f"{logger_name}.log"))

        return logger

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> 'LoggingConfig':
        """
        Create LoggingConfig from dictionary.

        Args:
            config: Configuration dictionary

        Returns:
            LoggingConfig instance
        """
        return cls(
            log_dir=config.get('log_dir'),
            max_bytes=config.get('max_bytes', cls.DEFAULT_MAX_BYTES),
            backup_count=config.get('backup_count', cls.DEFAULT_BACKUP_COUNT),
            console_level=config.get('console_level'),
            file_level=config.get('file_level', 'DEBUG'),
            use_json=config.get('use_json'),
            propagate=config.get('propagate', False),
        )


# Singleton instance for easy access
_default_config: Optional[LoggingConfig] = None


def get_logging_config() -> LoggingConfig:
    """Get or create default logging configuration from the validated environment."""
    global _default_config
    if _default_config is None:
        validate_environment(env)
        _default_config = LoggingConfig()
    return _default_config


def set_logging_config(config: LoggingConfig) -> None:
    """Set default logging configuration."""
    global _default_config
    _default_config = config
