"""
tagcache - Test Configuration and Shared Fixtures

Provides pytest configuration and shared fixtures for unit and integration tests.
"""

import os
from collections.abc import Generator
from typing import Any

import pytest
from sqlalchemy import Engine, create_engine
from sqlalchemy.pool import StaticPool

from tagcache.backends.sql import SqlCacheBackend
from tagcache.config import CacheOptions

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "DEBUG"


class FakeClock:
    """Controllable epoch-seconds clock for TTL tests."""

    def __init__(self, now: int = 1_700_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """In-memory SQLite engine shared across connections of one test."""
    eng = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    yield eng
    eng.dispose()


@pytest.fixture
def options() -> CacheOptions:
    """Default options with a test-specific prefix."""
    return CacheOptions(prefix_key="test-key:", prefix_tag="test-tag:")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(engine: Engine, options: CacheOptions, clock: FakeClock, monkeypatch: pytest.MonkeyPatch) -> SqlCacheBackend:
    """Fresh SQL cache on an in-memory database, driven by the fake clock."""
    backend = SqlCacheBackend(engine, options)
    monkeypatch.setattr(backend, "_now", clock)
    return backend


@pytest.fixture
def sample_cache_data() -> dict[str, Any]:
    """Sample data for cache testing."""
    return {
        "simple_string": "hello",
        "simple_int": 42,
        "simple_float": 3.14,
        "simple_bool": True,
        "complex_dict": {
            "nested": {
                "key": "value",
                "number": 123,
                "list": [1, 2, 3],
            }
        },
        "complex_list": [
            {"id": 1, "name": "Alice"},
            {"id": 2, "name": "Bob"},
        ],
    }


@pytest.fixture(autouse=True)
def reset_cache_factory() -> Generator[None, None, None]:
    """Reset cache factory and config singleton after each test to prevent state leakage."""
    yield
    from tagcache.config import loader
    from tagcache.factory import reset_cache_factory

    reset_cache_factory()
    loader._config_instance = None
