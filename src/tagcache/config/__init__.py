"""
tagcache - Configuration Module

Provides typed configuration loading and validation.
"""

from .loader import get_config, load_config, reload_config
from .schemas import (
    CacheOptions,
    Environment,
    LogLevel,
    SerializerName,
    TagCacheConfig,
)

__all__ = [
    # Loader functions
    "load_config",
    "get_config",
    "reload_config",
    # Main config
    "TagCacheConfig",
    # Enums
    "Environment",
    "LogLevel",
    "SerializerName",
    # Config sections
    "CacheOptions",
]
