"""Tests for CollectionConfig validation, presets and environment loading."""

from __future__ import annotations

import pytest

from doclayer.core.config import CollectionConfig

ENV_NAMES = (
    "DOCLAYER_ENABLE_LOGGING",
    "DOCLAYER_LOG_LEVEL",
    "DOCLAYER_LOG_DIR",
    "DOCLAYER_KEEP_ARRAYS",
    "DOCLAYER_KEEP_EMPTY_STRINGS",
    "DOCLAYER_ENABLE_CACHING",
    "DOCLAYER_CACHE_DIR",
    "DOCLAYER_CACHE_TTL",
)


@pytest.fixture
def clean_env(monkeypatch):
    # setenv first so monkeypatch restores the unset state after load_dotenv writes
    for name in ENV_NAMES:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return monkeypatch


class TestDefaults:
    def test_defaults(self):
        config = CollectionConfig()
        assert config.enable_logging is True
        assert config.log_level == "INFO"
        assert config.keep_arrays is True
        assert config.keep_empty_strings is False
        assert config.enable_caching is False
        assert config.cache_ttl == 3600


class TestValidation:
    def test_log_level_uppercased(self):
        assert CollectionConfig(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValueError, match="log_level"):
            CollectionConfig(log_level="LOUD")

    def test_negative_ttl(self):
        with pytest.raises(ValueError, match="cache_ttl"):
            CollectionConfig(cache_ttl=-1)

    def test_empty_cache_dir(self):
        with pytest.raises(ValueError, match="cache_dir"):
            CollectionConfig(cache_dir="")


class TestPresets:
    def test_development(self):
        config = CollectionConfig.for_development()
        assert config.log_level == "DEBUG"
        assert config.enable_caching is False

    def test_production(self):
        config = CollectionConfig.for_production()
        assert config.log_level == "WARNING"
        assert config.enable_caching is True


class TestFromEnv:
    def test_reads_prefixed_variables(self, clean_env, tmp_path):
        clean_env.setenv("DOCLAYER_ENABLE_CACHING", "true")
        clean_env.setenv("DOCLAYER_KEEP_ARRAYS", "0")
        clean_env.setenv("DOCLAYER_LOG_LEVEL", "warning")
        clean_env.setenv("DOCLAYER_CACHE_TTL", "60")

        config = CollectionConfig.from_env(str(tmp_path / "missing.env"))

        assert config.enable_caching is True
        assert config.keep_arrays is False
        assert config.log_level == "WARNING"
        assert config.cache_ttl == 60

    def test_unset_variables_keep_defaults(self, clean_env, tmp_path):
        config = CollectionConfig.from_env(str(tmp_path / "missing.env"))
        assert config == CollectionConfig()

    def test_dotenv_file(self, clean_env, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("DOCLAYER_KEEP_EMPTY_STRINGS=yes\nDOCLAYER_CACHE_DIR=/tmp/doclayer-cache\n")

        config = CollectionConfig.from_env(str(env_file))

        assert config.keep_empty_strings is True
        assert config.cache_dir == "/tmp/doclayer-cache"

    def test_environment_wins_over_dotenv(self, clean_env, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("DOCLAYER_LOG_LEVEL=DEBUG\n")
        clean_env.setenv("DOCLAYER_LOG_LEVEL", "ERROR")

        assert CollectionConfig.from_env(str(env_file)).log_level == "ERROR"

    def test_invalid_value_raises(self, clean_env, tmp_path):
        clean_env.setenv("DOCLAYER_LOG_LEVEL", "chatty")
        with pytest.raises(ValueError):
            CollectionConfig.from_env(str(tmp_path / "missing.env"))
