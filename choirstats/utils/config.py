"""
ChoirStats - Configuration Management

This module handles loading and validating configuration from environment variables
and an optional .env file.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from choirstats.calculators.region_classifier import HOME_REGION
from choirstats.cache.refresh_policy import DEFAULT_REFRESH_INTERVAL
from choirstats.cache.redis_store import RedisDocumentStore


@dataclass
class RedisConfig:
    """Configuration for the Redis statistics store."""
    url: str = "redis://localhost:6379"
    key_prefix: str = RedisDocumentStore.PREFIX_MONTHLY


@dataclass
class StatisticsConfig:
    """Configuration for statistics classification and refresh."""
    home_region: str = HOME_REGION
    refresh_interval_seconds: int = DEFAULT_REFRESH_INTERVAL


@dataclass
class Config:
    """
    Main configuration class that aggregates all configuration sections.

    Loads configuration from environment variables with .env file support.
    """
    redis: RedisConfig = field(default_factory=RedisConfig)
    statistics: StatisticsConfig = field(default_factory=StatisticsConfig)

    # Paths
    log_dir: Path = field(default_factory=lambda: Path("data/logs"))

    env_file: Optional[Path] = field(default_factory=lambda: Path(".env"))

    def __post_init__(self):
        """Load configuration from environment after initialization."""
        if self.env_file is not None and self.env_file.exists():
            load_dotenv(self.env_file)

        self.redis = RedisConfig(
            url=self._build_redis_url(),
            key_prefix=os.getenv("CHOIRSTATS_KEY_PREFIX", RedisDocumentStore.PREFIX_MONTHLY)
        )

        self.statistics = StatisticsConfig(
            home_region=os.getenv("CHOIRSTATS_HOME_REGION", HOME_REGION),
            refresh_interval_seconds=self._get_int_env(
                "CHOIRSTATS_REFRESH_INTERVAL", DEFAULT_REFRESH_INTERVAL
            )
        )

        log_dir = os.getenv("CHOIRSTATS_LOG_DIR")
        if log_dir:
            self.log_dir = Path(log_dir)

    def _build_redis_url(self) -> str:
        """
        Resolve the Redis URL.

        Priority:
            1. REDIS_URL environment variable
            2. Build from REDIS_HOST and REDIS_PORT (container-friendly)
            3. Default: redis://localhost:6379
        """
        redis_url = os.getenv("REDIS_URL")
        if redis_url:
            return redis_url
        redis_host = os.getenv("REDIS_HOST", "localhost")
        redis_port = os.getenv("REDIS_PORT", "6379")
        return f"redis://{redis_host}:{redis_port}"

    def _get_int_env(self, key: str, default: int) -> int:
        """
        Get an integer environment variable.

        Args:
            key: Environment variable name
            default: Value when the variable is not set

        Returns:
            Parsed integer value

        Raises:
            ValueError: If the variable is set but is not a positive integer
        """
        value = os.getenv(key)
        if value is None or value == "":
            return default
        try:
            parsed = int(value)
        except ValueError:
            raise ValueError(f"Environment variable {key} must be an integer, got {value!r}")
        if parsed <= 0:
            raise ValueError(f"Environment variable {key} must be positive, got {parsed}")
        return parsed
