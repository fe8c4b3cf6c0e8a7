"""
tagcache - Serialization Adapters

Closed set of value encodings, selected once from configuration:

- none:   no adapter; the caller stores raw bytes
- pickle: generic Python objects
- orjson: fast JSON codec (UTF-8 bytes output)
- json:   text JSON (UTF-8 encoded for storage)

Every adapter turns a value into bytes and back. Failures raise
SerializationError with the original exception chained; nothing falls back
to another encoding.
"""

from __future__ import annotations

import json
import logging
import pickle
from abc import ABC, abstractmethod
from typing import Any

import orjson

from .config.schemas import SerializerName
from .errors import ConfigurationError, SerializationError

logger = logging.getLogger(__name__)


class Serializer(ABC):
    """Abstract value encoder."""

    name: SerializerName

    @abstractmethod
    def serialize(self, value: Any) -> bytes:
        """Encode a value into its storable form."""

    @abstractmethod
    def deserialize(self, data: bytes) -> Any:
        """Decode a stored payload back into a value."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class PickleSerializer(Serializer):
    name = SerializerName.PICKLE

    def serialize(self, value: Any) -> bytes:
        try:
            return pickle.dumps(value, protocol=pickle.HIGHEST_PROTOCOL)
        except (pickle.PicklingError, TypeError, AttributeError) as e:
            raise SerializationError(
                self.name.value, "serialize", {"value_type": type(value).__name__, "error": str(e)}
            ) from e

    def deserialize(self, data: bytes) -> Any:
        try:
            return pickle.loads(data)
        except (pickle.UnpicklingError, EOFError, TypeError, ValueError, AttributeError, ImportError) as e:
            raise SerializationError(self.name.value, "deserialize", {"error": str(e)}) from e


class OrjsonSerializer(Serializer):
    name = SerializerName.ORJSON

    def serialize(self, value: Any) -> bytes:
        try:
            return orjson.dumps(value)
        except TypeError as e:  # orjson.JSONEncodeError subclasses TypeError
            raise SerializationError(
                self.name.value, "serialize", {"value_type": type(value).__name__, "error": str(e)}
            ) from e

    def deserialize(self, data: bytes) -> Any:
        try:
            return orjson.loads(data)
        except orjson.JSONDecodeError as e:
            raise SerializationError(self.name.value, "deserialize", {"error": str(e)}) from e


class JsonSerializer(Serializer):
    name = SerializerName.JSON

    def serialize(self, value: Any) -> bytes:
        try:
            return json.dumps(value, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise SerializationError(
                self.name.value, "serialize", {"value_type": type(value).__name__, "error": str(e)}
            ) from e

    def deserialize(self, data: bytes) -> Any:
        try:
            return json.loads(bytes(data).decode("utf-8"))
        except (ValueError, UnicodeDecodeError) as e:
            raise SerializationError(self.name.value, "deserialize", {"error": str(e)}) from e


_SERIALIZERS: dict[SerializerName, type[Serializer]] = {
    SerializerName.PICKLE: PickleSerializer,
    SerializerName.ORJSON: OrjsonSerializer,
    SerializerName.JSON: JsonSerializer,
}


def create_serializer(name: SerializerName | str | None) -> Serializer | None:
    """
    Build the serializer for a configured encoding.

    Args:
        name: Encoding name; None or "none" disables serialization

    Returns:
        Serializer instance, or None when serialization is disabled

    Raises:
        ConfigurationError: If the name is not a supported encoding
    """
    if name is None:
        return None

    try:
        selected = SerializerName(name.lower() if isinstance(name, str) else name)
    except ValueError as e:
        raise ConfigurationError(
            f"Unknown serializer: {name}",
            details={"serializer": str(name), "supported": [s.value for s in SerializerName]},
        ) from e

    if selected is SerializerName.NONE:
        return None

    logger.debug("Selected serializer: %s", selected.value)
    return _SERIALIZERS[selected]()


def encode_raw(value: Any) -> bytes | None:
    """Validate a payload stored without a serializer."""
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise SerializationError(
        SerializerName.NONE.value,
        "serialize",
        {"value_type": type(value).__name__, "error": "raw payloads must be bytes"},
    )
