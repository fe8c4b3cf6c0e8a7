"""
tagcache - Configuration Schemas

Defines typed configuration models using Pydantic for validation and type safety.
All configuration is validated once, at construction, and is read-only afterwards.
"""

import re
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class Environment(str, Enum):
    """Runtime environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TEST = "test"


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class SerializerName(str, Enum):
    """Supported value encodings."""

    NONE = "none"  # caller stores raw bytes
    PICKLE = "pickle"  # generic Python objects
    ORJSON = "orjson"  # fast JSON codec
    JSON = "json"  # text JSON


class CacheOptions(BaseModel):
    """Per-instance cache options."""

    prefix_key: str = Field(default="apix-cache-key:", description="Prefix for cache keys")
    prefix_tag: str = Field(default="apix-cache-tag:", description="Prefix for cache tags")
    tag_enable: bool = Field(default=True, description="Whether to store and query tags")
    format_timestamp: str = Field(
        default="%Y-%m-%d %H:%M:%S",
        min_length=1,
        description="strftime format for created_at/updated_at",
    )
    serializer: SerializerName = Field(default=SerializerName.PICKLE, description="Value encoding")
    db_table: str = Field(default="cache", description="Storage table name")

    # Secondary indexes created by create_indexes()
    key_idx: bool = Field(default=True, description="Index the key column")
    exp_idx: bool = Field(default=True, description="Index the expires_at column")
    tag_idx: bool = Field(default=True, description="Index the tag membership column")

    @field_validator("db_table")
    @classmethod
    def validate_db_table(cls, v: str) -> str:
        """Table names are interpolated into DDL, so only plain identifiers are allowed."""
        if not _IDENTIFIER.match(v):
            raise ValueError(f"db_table must be a plain SQL identifier, got {v!r}")
        return v

    model_config = ConfigDict(frozen=True, extra="forbid")


class TagCacheConfig(BaseModel):
    """Root configuration for tagcache."""

    environment: Environment = Field(default=Environment.DEVELOPMENT, description="Runtime environment")
    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")

    database_url: str = Field(
        default="sqlite:///./data/cache.db",
        min_length=1,
        description="SQLAlchemy database URL used when the factory builds the engine",
    )
    echo_sql: bool = Field(default=False, description="Log emitted SQL (SQLAlchemy echo)")

    cache: CacheOptions = Field(default_factory=CacheOptions)

    model_config = ConfigDict(use_enum_values=True, validate_assignment=True)
