"""
tagcache - Error Type Tests
"""

import pytest

from tagcache.errors import (
    BackendExecutionError,
    CacheError,
    ConfigurationError,
    EmptyInputError,
    ErrorCode,
    SerializationError,
    TagCacheError,
    ValidationError,
    extract_error_code,
)


def test_to_dict() -> None:
    error = BackendExecutionError("save", details={"error": "disk I/O error"})

    assert error.to_dict() == {
        "error": "BackendExecutionError",
        "message": "Storage backend failed during 'save'",
        "details": {"error": "disk I/O error", "operation": "save"},
    }


def test_hierarchy() -> None:
    assert issubclass(BackendExecutionError, CacheError)
    assert issubclass(SerializationError, CacheError)
    assert issubclass(EmptyInputError, ValidationError)
    assert issubclass(ConfigurationError, TagCacheError)


def test_status_codes() -> None:
    assert EmptyInputError("tags", "clean").status_code == 400
    assert SerializationError("json", "serialize").status_code == 500


@pytest.mark.parametrize(
    "error, code",
    [
        (EmptyInputError("tags", "clean"), ErrorCode.EMPTY_INPUT),
        (ValidationError("bad"), ErrorCode.INVALID_INPUT),
        (BackendExecutionError("load_key"), ErrorCode.BACKEND_FAILURE),
        (SerializationError("pickle", "deserialize"), ErrorCode.SERIALIZATION_FAILURE),
        (CacheError("generic"), ErrorCode.CACHE_FAILURE),
        (ConfigurationError("bad config"), ErrorCode.INVALID_CONFIGURATION),
        (RuntimeError("boom"), ErrorCode.INTERNAL_ERROR),
    ],
)
def test_extract_error_code(error: Exception, code: ErrorCode) -> None:
    assert extract_error_code(error) is code
