"""
tagcache - Cache Backends

Exports available cache backend implementations.
"""

from .sql import SqlCacheBackend

__all__ = [
    "SqlCacheBackend",
]
