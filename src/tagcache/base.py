"""
tagcache - Base Cache

Shared plumbing for cache backends: options, key/tag mapping, serializer
selection and timestamp formatting. Backends only implement storage.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from .config.schemas import CacheOptions, SerializerName
from .errors import ConfigurationError
from .interface import CacheInterface
from .mapping import KeyMapper
from .serializers import Serializer, create_serializer, encode_raw

logger = logging.getLogger(__name__)


class BaseCache(CacheInterface):
    """
    Cache wrapper around an injected storage adapter.

    The adapter (a connection pool, client, ...) is owned by the caller;
    the cache never closes it.
    """

    def __init__(self, adapter: Any, options: CacheOptions | None = None):
        self._adapter = adapter
        self._options = options or CacheOptions()
        self._mapper = KeyMapper(self._options.prefix_key, self._options.prefix_tag)
        self._serializer = create_serializer(self._options.serializer)

    # ------------ Options ------------

    @property
    def options(self) -> CacheOptions:
        return self._options

    def get_option(self, name: str) -> Any:
        """Return an option value, or None for unknown names."""
        return getattr(self._options, name, None)

    def set_options(self, **overrides: Any) -> CacheOptions:
        """
        Replace options with a validated copy carrying the given overrides.

        Mapper and serializer are rebuilt from the new options.

        Raises:
            ConfigurationError: If an override is unknown or invalid
        """
        try:
            merged = CacheOptions(**{**self._options.model_dump(), **overrides})
        except PydanticValidationError as e:
            raise ConfigurationError(
                "Invalid cache options",
                details={"overrides": sorted(overrides), "validation_errors": e.errors()},
            ) from e

        self._options = merged
        self._mapper = KeyMapper(merged.prefix_key, merged.prefix_tag)
        self._serializer = create_serializer(merged.serializer)
        logger.debug("Cache options updated", extra={"overrides": sorted(overrides)})
        return merged

    # ------------ Mapping ------------

    def map_key(self, key: str) -> str:
        return self._mapper.map_key(key)

    def map_tag(self, tag: str) -> str:
        return self._mapper.map_tag(tag)

    # ------------ Adapter / serializer ------------

    def get_adapter(self) -> Any:
        """Return the injected storage adapter."""
        return self._adapter

    def get_serializer(self) -> Serializer | None:
        return self._serializer

    def set_serializer(self, name: SerializerName | str | None) -> None:
        """
        Switch the value encoding.

        Args:
            name: Encoding name; None or "none" stores raw bytes
        """
        self._serializer = create_serializer(name)
        selected = SerializerName.NONE if self._serializer is None else self._serializer.name
        self._options = self._options.model_copy(update={"serializer": selected})

    def _encode(self, value: Any) -> bytes | None:
        if self._serializer is None:
            return encode_raw(value)
        return self._serializer.serialize(value)

    def _decode(self, data: bytes) -> Any:
        if self._serializer is None:
            return bytes(data)
        return self._serializer.deserialize(bytes(data))

    # ------------ Time ------------

    def _now(self) -> int:
        return int(time.time())

    def timestamp(self, when: float | None = None) -> str:
        """
        Format a timestamp with the configured format.

        Args:
            when: Epoch seconds; falsy values mean "now"
        """
        return time.strftime(self._options.format_timestamp, time.localtime(when or self._now()))
