"""
Environment detection and .env file loading.

Uses a single .env file at the project root (or the path named by
POINTS_ENV_FILE). Values already present in the process environment win.
"""
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from Config.constants_core import (
    DEFAULT_ENV_NAME,
    DEFAULT_LOG_LEVEL,
    JSON_LOG_ENVIRONMENTS,
)


_TRUTHY = ('1', 'true', 'yes', 'on')
_FALSY = ('0', 'false', 'no', 'off')


def parse_bool(value: Optional[str]) -> Optional[bool]:
    """Parse an env flag. Returns None for unset/blank values."""
    if value is None or not value.strip():
        return None
    lowered = value.strip().lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise ValueError(f"Not a boolean flag: {value!r}")


class Environment:
    """Detect and configure environment."""

    def __init__(self, env_file: Optional[Path] = None):
        self.env_file = env_file or self._find_env_file()
        self._loaded = False

    def _find_env_file(self) -> Optional[Path]:
        """Find the .env file for current environment."""
        override = os.getenv('POINTS_ENV_FILE')
        if override:
            env_path = Path(override)
        else:
            # Go up from Config/ to project root
            project_root = Path(__file__).parents[1]
            env_path = project_root / '.env'

        return env_path if env_path.exists() else None

    def load(self, force_reload: bool = False) -> None:
        """
        Load environment variables from file.

        Args:
            force_reload: If True, reload even if already loaded
        """
        if self._loaded and not force_reload:
            return

        if self.env_file:
            load_dotenv(self.env_file, override=False)
        self._loaded = True

    # ========================================================================
    # Environment-Specific Helpers
    # ========================================================================

    @property
    def env_name(self) -> str:
        """Runtime environment name (dev, test, staging, prod)."""
        return os.getenv('POINTS_ENV', DEFAULT_ENV_NAME).strip().lower()

    @property
    def log_level(self) -> str:
        """Console log level name."""
        return os.getenv('LOG_LEVEL', DEFAULT_LOG_LEVEL).strip().upper()

    @property
    def log_dir(self) -> Optional[Path]:
        """Directory for rotating log files, None for console-only logging."""
        base = os.getenv('POINTS_LOG_DIR')
        if base and base.strip():
            return Path(base.strip())
        return None

    @property
    def use_json(self) -> bool:
        """Emit JSON logs; defaults on in staging and prod."""
        flag = parse_bool(os.getenv('LOG_JSON'))
        if flag is None:
            return self.env_name in JSON_LOG_ENVIRONMENTS
        return flag

    def as_dict(self) -> dict:
        return {
            'env_name': self.env_name,
            'log_level': self.log_level,
            'log_dir': str(self.log_dir) if self.log_dir else None,
            'log_json': os.getenv('LOG_JSON'),
        }

    def __repr__(self) -> str:
        return f"Environment(env={self.env_name}, file={self.env_file})"


# ============================================================================
# Global Instance - Auto-load on import
# ============================================================================

env = Environment()
env.load()
