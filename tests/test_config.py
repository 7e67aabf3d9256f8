"""
ChoirStats - Configuration Tests

Tests for environment-driven configuration.
"""

import os
from pathlib import Path

import pytest

from choirstats.cache.redis_store import RedisDocumentStore
from choirstats.calculators.region_classifier import HOME_REGION
from choirstats.utils.config import Config


ENV_VARS = [
    "REDIS_URL",
    "REDIS_HOST",
    "REDIS_PORT",
    "CHOIRSTATS_KEY_PREFIX",
    "CHOIRSTATS_HOME_REGION",
    "CHOIRSTATS_REFRESH_INTERVAL",
    "CHOIRSTATS_LOG_DIR",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestConfig:
    """Test suite for Config."""

    def test_defaults(self):
        """Verify defaults without any environment."""
        config = Config(env_file=None)

        assert config.redis.url == "redis://localhost:6379"
        assert config.redis.key_prefix == RedisDocumentStore.PREFIX_MONTHLY
        assert config.statistics.home_region == HOME_REGION
        assert config.statistics.refresh_interval_seconds == 3600
        assert config.log_dir == Path("data/logs")

    def test_redis_url_wins_over_host_and_port(self, monkeypatch):
        """Verify REDIS_URL takes priority."""
        monkeypatch.setenv("REDIS_URL", "redis://cache:6380/2")
        monkeypatch.setenv("REDIS_HOST", "ignored")

        assert Config(env_file=None).redis.url == "redis://cache:6380/2"

    def test_redis_host_and_port(self, monkeypatch):
        """Verify the URL is built from host and port."""
        monkeypatch.setenv("REDIS_HOST", "redis")
        monkeypatch.setenv("REDIS_PORT", "6390")

        assert Config(env_file=None).redis.url == "redis://redis:6390"

    def test_statistics_overrides(self, monkeypatch, tmp_path):
        """Verify statistics and path settings come from the environment."""
        monkeypatch.setenv("CHOIRSTATS_HOME_REGION", "Липецкая область")
        monkeypatch.setenv("CHOIRSTATS_REFRESH_INTERVAL", "600")
        monkeypatch.setenv("CHOIRSTATS_KEY_PREFIX", "test:stats")
        monkeypatch.setenv("CHOIRSTATS_LOG_DIR", str(tmp_path))

        config = Config(env_file=None)

        assert config.statistics.home_region == "Липецкая область"
        assert config.statistics.refresh_interval_seconds == 600
        assert config.redis.key_prefix == "test:stats"
        assert config.log_dir == tmp_path

    @pytest.mark.parametrize("value", ["soon", "0", "-5"])
    def test_invalid_refresh_interval(self, monkeypatch, value):
        """Verify non-positive or non-numeric intervals are rejected."""
        monkeypatch.setenv("CHOIRSTATS_REFRESH_INTERVAL", value)

        with pytest.raises(ValueError):
            Config(env_file=None)

    def test_env_file_is_loaded(self, tmp_path):
        """Verify values are read from a .env file."""
        env_file = tmp_path / ".env"
        env_file.write_text("CHOIRSTATS_HOME_REGION=Коми\n", encoding="utf-8")

        try:
            config = Config(env_file=env_file)
        finally:
            os.environ.pop("CHOIRSTATS_HOME_REGION", None)

        assert config.statistics.home_region == "Коми"
