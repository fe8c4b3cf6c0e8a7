"""
tagcache - Configuration Loader

Loads and validates configuration from environment variables and .env files.
Provides a singleton configuration instance for the runtime.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

from ..errors import ConfigurationError
from .schemas import TagCacheConfig

logger = logging.getLogger(__name__)

_config_instance: TagCacheConfig | None = None


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


def load_config(
    env_file: str | None = None,
    reload: bool = False,
) -> TagCacheConfig:
    """
    Load configuration from environment variables and .env file.

    Args:
        env_file: Path to .env file (default: .env in the working directory)
        reload: Force reload even if config already loaded

    Returns:
        Validated TagCacheConfig instance

    Raises:
        ConfigurationError: If configuration is invalid
    """
    global _config_instance

    if _config_instance is not None and not reload:
        return _config_instance

    env_path = Path(env_file) if env_file else Path.cwd() / ".env"

    if env_path.exists():
        logger.info(f"Loading environment from {env_path}")
        try:
            load_dotenv(env_path, override=True)
        except Exception as e:
            logger.error(
                f"Failed to load .env file from {env_path}: {e}",
                extra={"path": str(env_path), "error": str(e)},
                exc_info=True,
            )
            raise ConfigurationError(
                f"Failed to load environment file: {e}",
                details={"path": str(env_path), "error": str(e)},
            ) from e
    else:
        logger.debug("No .env file found, using environment variables only")

    config_dict = {
        "environment": os.getenv("ENVIRONMENT", "development"),
        "log_level": os.getenv("LOG_LEVEL", "INFO"),
        "database_url": os.getenv("TAGCACHE_DATABASE_URL", "sqlite:///./data/cache.db"),
        "echo_sql": _env_flag("TAGCACHE_ECHO_SQL", "false"),
        "cache": {
            "prefix_key": os.getenv("TAGCACHE_PREFIX_KEY", "apix-cache-key:"),
            "prefix_tag": os.getenv("TAGCACHE_PREFIX_TAG", "apix-cache-tag:"),
            "tag_enable": _env_flag("TAGCACHE_TAG_ENABLE", "true"),
            "format_timestamp": os.getenv("TAGCACHE_FORMAT_TIMESTAMP", "%Y-%m-%d %H:%M:%S"),
            "serializer": os.getenv("TAGCACHE_SERIALIZER", "pickle").lower(),
            "db_table": os.getenv("TAGCACHE_DB_TABLE", "cache"),
            "key_idx": _env_flag("TAGCACHE_KEY_IDX", "true"),
            "exp_idx": _env_flag("TAGCACHE_EXP_IDX", "true"),
            "tag_idx": _env_flag("TAGCACHE_TAG_IDX", "true"),
        },
    }

    try:
        _config_instance = TagCacheConfig(**config_dict)  # type: ignore[arg-type]
        logging.getLogger("tagcache").setLevel(_config_instance.log_level)
        logger.info(
            f"Configuration loaded successfully (environment: {_config_instance.environment})",
            extra={
                "environment": _config_instance.environment,
                "db_table": _config_instance.cache.db_table,
                "serializer": _config_instance.cache.serializer.value,
            },
        )
        return _config_instance
    except ValidationError as e:
        logger.error(
            f"Configuration validation failed: {e}",
            extra={"validation_errors": e.errors(), "config_dict_keys": list(config_dict.keys())},
            exc_info=True,
        )
        raise ConfigurationError(
            "Configuration validation failed. Check your environment variables and configuration.",
            details={"validation_errors": e.errors()},
        ) from e


def get_config() -> TagCacheConfig:
    """
    Get the current configuration instance, loading it on first access.

    Returns:
        Current TagCacheConfig instance
    """
    if _config_instance is None:
        return load_config()

    return _config_instance


def reload_config(env_file: str | None = None) -> TagCacheConfig:
    """
    Force reload configuration.

    Args:
        env_file: Optional path to .env file

    Returns:
        Reloaded TagCacheConfig instance
    """
    return load_config(env_file=env_file, reload=True)
