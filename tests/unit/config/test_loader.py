"""
tagcache - Configuration Tests

Environment-driven loading and validation of cache options.
"""

import logging
from pathlib import Path

import pytest

from tagcache.config import (
    CacheOptions,
    SerializerName,
    get_config,
    load_config,
    reload_config,
)
from tagcache.errors import ConfigurationError


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Start from a working directory without .env and no TAGCACHE_* variables."""
    monkeypatch.chdir(tmp_path)
    for name in (
        "TAGCACHE_DATABASE_URL",
        "TAGCACHE_DB_TABLE",
        "TAGCACHE_PREFIX_KEY",
        "TAGCACHE_PREFIX_TAG",
        "TAGCACHE_TAG_ENABLE",
        "TAGCACHE_SERIALIZER",
        "TAGCACHE_FORMAT_TIMESTAMP",
        "TAGCACHE_KEY_IDX",
        "TAGCACHE_EXP_IDX",
        "TAGCACHE_TAG_IDX",
        "TAGCACHE_ECHO_SQL",
    ):
        # setenv first so that values written by load_dotenv are undone too
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


class TestCacheOptions:
    """Test suite for CacheOptions validation."""

    def test_defaults(self) -> None:
        options = CacheOptions()
        assert options.prefix_key == "apix-cache-key:"
        assert options.prefix_tag == "apix-cache-tag:"
        assert options.tag_enable is True
        assert options.format_timestamp == "%Y-%m-%d %H:%M:%S"
        assert options.serializer is SerializerName.PICKLE
        assert options.db_table == "cache"
        assert (options.key_idx, options.exp_idx, options.tag_idx) == (True, True, True)

    def test_frozen(self) -> None:
        options = CacheOptions()
        with pytest.raises(ValueError):
            options.db_table = "other"  # type: ignore[misc]

    @pytest.mark.parametrize("table", ["cache; DROP TABLE users", "1cache", "my-cache", ""])
    def test_rejects_unsafe_table_names(self, table: str) -> None:
        with pytest.raises(ValueError):
            CacheOptions(db_table=table)

    def test_rejects_unknown_serializer(self) -> None:
        with pytest.raises(ValueError):
            CacheOptions(serializer="igbinary")  # type: ignore[arg-type]

    def test_rejects_unknown_option(self) -> None:
        with pytest.raises(ValueError):
            CacheOptions(prefix="x")  # type: ignore[call-arg]


class TestLoadConfig:
    """Test suite for the environment loader."""

    def test_defaults(self, clean_env: None) -> None:
        config = load_config(reload=True)

        assert config.environment == "test"
        assert config.database_url == "sqlite:///./data/cache.db"
        assert config.echo_sql is False
        assert config.cache == CacheOptions()

    def test_reads_environment(self, clean_env: None, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TAGCACHE_DATABASE_URL", "sqlite://")
        monkeypatch.setenv("TAGCACHE_DB_TABLE", "sessions")
        monkeypatch.setenv("TAGCACHE_SERIALIZER", "JSON")
        monkeypatch.setenv("TAGCACHE_TAG_ENABLE", "false")
        monkeypatch.setenv("TAGCACHE_KEY_IDX", "false")

        config = load_config(reload=True)

        assert config.database_url == "sqlite://"
        assert config.cache.db_table == "sessions"
        assert config.cache.serializer is SerializerName.JSON
        assert config.cache.tag_enable is False
        assert config.cache.key_idx is False
        assert config.cache.exp_idx is True

    def test_reads_env_file(self, clean_env: None, tmp_path: Path) -> None:
        env_file = tmp_path / "custom.env"
        env_file.write_text("TAGCACHE_PREFIX_KEY=app:\nTAGCACHE_SERIALIZER=orjson\n")

        config = load_config(env_file=str(env_file), reload=True)

        assert config.cache.prefix_key == "app:"
        assert config.cache.serializer is SerializerName.ORJSON

    def test_invalid_value_raises_configuration_error(
        self, clean_env: None, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("TAGCACHE_SERIALIZER", "igbinary")

        with pytest.raises(ConfigurationError) as exc_info:
            load_config(reload=True)

        assert exc_info.value.details["validation_errors"]

    def test_singleton(self, clean_env: None, monkeypatch: pytest.MonkeyPatch) -> None:
        first = get_config()
        monkeypatch.setenv("TAGCACHE_DB_TABLE", "changed")

        assert get_config() is first
        assert reload_config().cache.db_table == "changed"

    def test_applies_log_level_to_package_logger(
        self, clean_env: None, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        package_logger = logging.getLogger("tagcache")
        previous = package_logger.level
        root_level = logging.getLogger().level
        monkeypatch.setenv("LOG_LEVEL", "WARNING")

        try:
            assert reload_config().log_level == "WARNING"
            assert package_logger.level == logging.WARNING
            assert logging.getLogger("tagcache.backends.sql").getEffectiveLevel() == logging.WARNING
            assert logging.getLogger().level == root_level
        finally:
            package_logger.setLevel(previous)
