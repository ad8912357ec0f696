"""
Configuration for doclayer collections.

A single dataclass with sensible defaults, a couple of presets and an
environment loader for twelve-factor deployments.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
ENV_PREFIX = "DOCLAYER_"


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class CollectionConfig:
    """
    Per-collection configuration.

    Modifier options here are defaults; ``Context.options`` may override
    ``keep_arrays`` / ``keep_empty_strings`` for a single ``save`` call.
    """

    # === Logging ===
    enable_logging: bool = True
    """Emit operation logs for this collection"""

    log_level: str = "INFO"
    """Logging level applied by ``configure_logging``"""

    log_dir: Optional[str] = None
    """Directory for log files (None = console only)"""

    # === Partial updates ===
    keep_arrays: bool = True
    """Set arrays wholesale instead of element by element"""

    keep_empty_strings: bool = False
    """Set empty strings instead of unsetting the field"""

    # === Caching ===
    enable_caching: bool = False
    """Consult the document cache in ``find_by_id``"""

    cache_dir: str = ".doclayer"
    """Directory holding ``cache.db``"""

    cache_ttl: int = 3600
    """Cache time-to-live in seconds (0 = no expiry)"""

    def __post_init__(self):
        """Validate configuration values after initialization."""
        self.log_level = self.log_level.upper()
        if self.log_level not in VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {VALID_LOG_LEVELS}, got {self.log_level}")

        if self.cache_ttl < 0:
            raise ValueError(f"cache_ttl must be non-negative, got {self.cache_ttl}")

        if not self.cache_dir:
            raise ValueError("cache_dir must not be empty")

    @classmethod
    def for_development(cls) -> "CollectionConfig":
        """Verbose logging, no cache."""
        return cls(enable_logging=True, log_level="DEBUG", enable_caching=False)

    @classmethod
    def for_production(cls) -> "CollectionConfig":
        """Quieter logging with the document cache switched on."""
        return cls(enable_logging=True, log_level="WARNING", enable_caching=True)

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "CollectionConfig":
        """Build a config from ``DOCLAYER_*`` environment variables.

        A ``.env`` file is loaded first; variables already set in the
        environment take precedence.
        """
        load_dotenv(dotenv_path)
        values = {}

        for name in ("enable_logging", "keep_arrays", "keep_empty_strings", "enable_caching"):
            raw = os.getenv(ENV_PREFIX + name.upper())
            if raw is not None:
                values[name] = _env_bool(raw)

        for name in ("log_level", "log_dir", "cache_dir"):
            raw = os.getenv(ENV_PREFIX + name.upper())
            if raw:
                values[name] = raw

        raw_ttl = os.getenv(ENV_PREFIX + "CACHE_TTL")
        if raw_ttl:
            values["cache_ttl"] = int(raw_ttl)

        return cls(**values)
