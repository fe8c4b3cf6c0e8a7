"""
tagcache - Cache Factory

Canonical factory for creating cache instances based on configuration.

Key points:
- Instances are registered by name; asking twice for a name returns the same cache
- A caller may pass its own Engine and keeps ownership of it
- Without an Engine, one is built from TAGCACHE_DATABASE_URL and owned by the
  factory, which disposes of it in close_all_caches()

Examples:
    from tagcache.factory import create_cache, get_cache

    # Engine built from env-configured database URL
    cache = create_cache()

    # Or explicitly supply an engine and options (e.g., for tests)
    from sqlalchemy import create_engine
    from tagcache.config import CacheOptions
    engine = create_engine("sqlite://")
    test_cache = create_cache(CacheOptions(db_table="test_cache"), engine=engine, name="test")
"""

from __future__ import annotations

import logging
from pathlib import Path

from sqlalchemy import Engine, create_engine, make_url
from sqlalchemy.exc import ArgumentError

from .backends.sql import SqlCacheBackend
from .config import CacheOptions, TagCacheConfig, get_config
from .errors import ConfigurationError, TagCacheError

logger = logging.getLogger(__name__)

# Global cache instances registry
_cache_instances: dict[str, SqlCacheBackend] = {}

# Engines built here rather than supplied by a caller
_owned_engines: dict[str, Engine] = {}


def _create_engine(config: TagCacheConfig) -> Engine:
    """Internal helper to build an Engine from the configured database URL."""
    try:
        url = make_url(config.database_url)
    except ArgumentError as e:
        raise ConfigurationError(
            f"Invalid database URL: {e}",
            details={"env": "TAGCACHE_DATABASE_URL", "error": str(e)},
        ) from e

    # SQLite file databases need their directory to exist
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        Path(url.database).resolve().parent.mkdir(parents=True, exist_ok=True)

    return create_engine(url, echo=config.echo_sql)


def create_cache(
    options: CacheOptions | None = None,
    engine: Engine | None = None,
    name: str = "default",
) -> SqlCacheBackend:
    """
    Create a cache instance based on configuration.

    Args:
        options: Cache options (uses global config if not provided)
        engine: SQLAlchemy Engine to store into (built from config if not provided)
        name: Cache instance name (for multiple cache instances)

    Returns:
        Configured cache backend instance

    Raises:
        ConfigurationError: If configuration is invalid or the backend cannot be set up
    """
    if name in _cache_instances:
        logger.debug("Returning existing cache instance: %s", name)
        return _cache_instances[name]

    config = get_config() if options is None or engine is None else None
    if options is None:
        options = config.cache  # type: ignore[union-attr]

    owned = engine is None
    if engine is None:
        engine = _create_engine(config)  # type: ignore[arg-type]

    logger.info(
        "Creating cache instance '%s' on table '%s'",
        name,
        options.db_table,
        extra={"cache_name": name, "db_table": options.db_table, "dialect": engine.dialect.name},
    )

    try:
        cache = SqlCacheBackend(engine, options)
    except TagCacheError as e:
        if owned:
            engine.dispose()
        raise ConfigurationError(
            f"Failed to create cache instance '{name}': {e.message}",
            details={"cache_name": name, "db_table": options.db_table, **e.details},
        ) from e

    _cache_instances[name] = cache
    if owned:
        _owned_engines[name] = engine

    logger.info(
        "Cache instance '%s' created successfully",
        name,
        extra={"cache_name": name, "owns_engine": owned},
    )
    return cache


def get_cache(name: str = "default") -> SqlCacheBackend:
    """
    Get an existing cache instance by name.

    If the instance doesn't exist, it will be created automatically
    using the global configuration.
    """
    if name not in _cache_instances:
        logger.debug("Cache instance '%s' not found, creating new instance", name)
        return create_cache(name=name)

    return _cache_instances[name]


def close_all_caches() -> None:
    """
    Close all cache instances and dispose of factory-built engines.

    Engines supplied by callers are left untouched.
    """
    if not _cache_instances:
        logger.debug("No cache instances to close")
        return

    logger.info("Closing %d cache instance(s)...", len(_cache_instances))

    for name, cache in list(_cache_instances.items()):
        cache.close()
        engine = _owned_engines.pop(name, None)
        if engine is not None:
            engine.dispose()
        logger.info("Closed cache instance: %s", name)

    _cache_instances.clear()
    logger.info("All cache instances closed")


def reset_cache_factory() -> None:
    """
    Clear all instance references without closing anything.

    Warning: Only use this in testing contexts.
    """
    count = len(_cache_instances)
    _cache_instances.clear()
    _owned_engines.clear()
    logger.debug("Reset cache factory, cleared %d instance reference(s)", count)


def list_cache_instances() -> list[str]:
    """List all registered cache instance names."""
    return list(_cache_instances.keys())
