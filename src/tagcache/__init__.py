"""
tagcache - Tagged Relational Cache

Provides a cache contract with TTL and tag invalidation, stored in a
relational table through SQLAlchemy.

Layout:
- factory.py: Named cache instances built from configuration
- interface.py: Abstract cache interface all backends must implement
- base.py: Options, key/tag mapping, serializer and timestamp plumbing
- backends/: Storage implementations (SQL)

Usage:
    from tagcache import create_cache

    cache = create_cache()
    cache.save({"id": 1}, "user:1", tags=["users"], ttl=3600)
    cache.load("user:1")
    cache.clean(["users"])
"""

from .backends.sql import SqlCacheBackend
from .config import CacheOptions, SerializerName
from .factory import (
    close_all_caches,
    create_cache,
    get_cache,
    list_cache_instances,
    reset_cache_factory,
)
from .interface import CacheInterface

__all__ = [
    # Factory functions
    "create_cache",
    "get_cache",
    "close_all_caches",
    "list_cache_instances",
    "reset_cache_factory",
    # Interface and backend
    "CacheInterface",
    "SqlCacheBackend",
    # Options
    "CacheOptions",
    "SerializerName",
]
