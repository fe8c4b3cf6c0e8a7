"""
tagcache - SQL Cache Backend

Relational cache backend on top of SQLAlchemy Core with:
- Atomic upsert (native conflict clause on SQLite, PostgreSQL and MySQL,
  update-then-insert inside one transaction elsewhere)
- Per-entry TTL stored as epoch seconds; expired rows are invisible to reads
  until purge() removes them
- Exact tag membership through a "<table>_tags" join table

The Engine is supplied by the caller, who also disposes of it.

Example:
    engine = create_engine("sqlite:///cache.db")
    cache = SqlCacheBackend(engine, CacheOptions(serializer="json")).create_indexes()
    cache.save({"msg": "hello"}, "greeting", tags=["intro"], ttl=60)
    cache.load("greeting")
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from sqlalchemy import (
    BigInteger,
    Column,
    Engine,
    ForeignKey,
    Index,
    LargeBinary,
    MetaData,
    String,
    Table,
    Text,
    bindparam,
    delete,
    func,
    insert,
    or_,
    select,
    update,
)
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.sql.expression import ColumnElement

from ..base import BaseCache
from ..config.schemas import CacheOptions
from ..errors import EmptyInputError
from .executor import StatementExecutor

logger = logging.getLogger(__name__)

TAG_SEPARATOR = ", "


def build_tables(metadata: MetaData, name: str) -> tuple[Table, Table]:
    """Declare the record table and its tag membership table."""
    records = Table(
        name,
        metadata,
        Column("key", String(255), primary_key=True),
        Column("data", LargeBinary, nullable=True),
        Column("tags", Text, nullable=True),
        Column("expires_at", BigInteger, nullable=True),
        Column("created_at", String(64), nullable=False),
        Column("updated_at", String(64), nullable=False),
    )
    tags = Table(
        f"{name}_tags",
        metadata,
        Column("key", String(255), ForeignKey(records.c.key, ondelete="CASCADE"), primary_key=True),
        Column("tag", String(255), primary_key=True),
    )
    return records, tags


class SqlCacheBackend(BaseCache):
    """
    Tagged cache stored in a relational table.

    Notes:
    - Keys and tags are prefixed via the configured mapper before storage.
    - Tag rows are always written and removed in the same transaction as
      their record, so no statement depends on ON DELETE CASCADE.
    - flush(all=False) only removes live entries; expired rows wait for purge().
    """

    def __init__(self, engine: Engine, options: CacheOptions | None = None):
        """
        Initialize the backend and create its tables if missing.

        Args:
            engine: Connected SQLAlchemy Engine (owned by the caller)
            options: Cache options (defaults apply when omitted)

        Raises:
            BackendExecutionError: If the schema cannot be created
        """
        super().__init__(engine, options)
        self._executor = StatementExecutor(engine)
        self._bind_tables()

        self._hits = 0
        self._misses = 0
        self._sets = 0
        self._deletes = 0

    def _bind_tables(self) -> None:
        """Declare and create the tables named by the current options."""
        table = self._options.db_table
        self._metadata = MetaData()
        self._records, self._tags = build_tables(self._metadata, table)

        with self._executor.transaction("init") as conn:
            self._metadata.create_all(conn, checkfirst=True)

        # Declared after create_all so that only create_indexes() builds them
        self._indexes = {
            "key_idx": Index(f"{table}_key_idx", self._records.c.key),
            "exp_idx": Index(f"{table}_exp_idx", self._records.c.expires_at),
            "tag_idx": Index(f"{table}_tag_idx", self._tags.c.tag),
        }

        records, tags = self._records, self._tags
        self._load_key_stmt = select(records.c.data).where(
            records.c.key == bindparam("key"), self._live(bindparam("now"))
        )
        self._exists_stmt = select(records.c.key).where(
            records.c.key == bindparam("key"), self._live(bindparam("now"))
        )
        self._load_tag_stmt = (
            select(records.c.key)
            .join(tags, tags.c.key == records.c.key)
            .where(tags.c.tag == bindparam("tag"), self._live(bindparam("now")))
            .order_by(records.c.key)
        )

        logger.info(
            "SQL cache ready on table '%s'",
            table,
            extra={"db_table": table, "dialect": self._executor.engine.dialect.name},
        )

    def set_options(self, **overrides: Any) -> CacheOptions:
        """Apply option overrides; a new db_table is created and used from now on."""
        previous = self._options.db_table
        merged = super().set_options(**overrides)
        if merged.db_table != previous:
            self._bind_tables()
        return merged

    # ------------ Helpers ------------

    def _live(self, now: Any) -> ColumnElement[bool]:
        """Rows that have no expiry or expire after `now` (epoch seconds or a bound parameter)."""
        expires_at = self._records.c.expires_at
        return or_(expires_at.is_(None), expires_at > now)

    def _expires_at(self, ttl: int | None) -> int | None:
        if not ttl:
            return None
        return self._now() + int(ttl)

    def _normalise_tags(self, tags: Iterable[str] | None) -> list[str]:
        if tags is None or not self._options.tag_enable:
            return []
        if isinstance(tags, str):
            tags = [tags]
        return list(dict.fromkeys(tags))

    def _upsert_statement(self, values: dict[str, Any]) -> Any:
        """Native atomic upsert for dialects that have one, else None."""
        records = self._records
        dialect = self._executor.engine.dialect.name
        refreshed = ("data", "tags", "expires_at", "updated_at")

        if dialect in ("sqlite", "postgresql"):
            module = sqlite if dialect == "sqlite" else postgresql
            stmt = module.insert(records).values(**values)
            return stmt.on_conflict_do_update(
                index_elements=[records.c.key],
                set_={name: stmt.excluded[name] for name in refreshed},
            )

        if dialect in ("mysql", "mariadb"):
            stmt = mysql.insert(records).values(**values)
            return stmt.on_duplicate_key_update({name: stmt.inserted[name] for name in refreshed})

        return None

    # ------------ Core Interface ------------

    def load_key(self, key: str) -> Any | None:
        """Retrieve a live value by key."""
        row = self._executor.fetch_one(
            "load_key", self._load_key_stmt, {"key": self.map_key(key), "now": self._now()}
        )

        if row is None:
            self._misses += 1
            return None

        self._hits += 1
        if row.data is None:
            # Stored empty payload, not a miss
            return None

        return self._decode(row.data)

    def load_tag(self, tag: str) -> list[str] | None:
        """Return mapped keys of live entries carrying the tag, ordered by key."""
        params = {"tag": self.map_tag(tag), "now": self._now()}
        keys = [row.key for row in self._executor.fetch_all("load_tag", self._load_tag_stmt, params)]
        return keys or None

    def save(
        self,
        value: Any,
        key: str,
        tags: Iterable[str] | None = None,
        ttl: int | None = None,
    ) -> bool:
        """Store a value, replacing any previous entry and its tags."""
        tag_names = self._normalise_tags(tags)
        dated = self.timestamp()
        values = {
            "key": self.map_key(key),
            "data": self._encode(value),
            "tags": TAG_SEPARATOR.join(tag_names) if tag_names else None,
            "expires_at": self._expires_at(ttl),
            "created_at": dated,
            "updated_at": dated,
        }

        records, tag_table = self._records, self._tags
        mapped_key = values["key"]

        with self._executor.transaction("save") as conn:
            upsert = self._upsert_statement(values)
            if upsert is not None:
                written = conn.execute(upsert).rowcount
            else:
                changes = {name: values[name] for name in ("data", "tags", "expires_at", "updated_at")}
                written = conn.execute(
                    update(records).where(records.c.key == mapped_key).values(**changes)
                ).rowcount
                if written == 0:
                    written = conn.execute(insert(records).values(**values)).rowcount

            conn.execute(delete(tag_table).where(tag_table.c.key == mapped_key))
            if tag_names:
                conn.execute(
                    insert(tag_table),
                    [{"key": mapped_key, "tag": self.map_tag(name)} for name in tag_names],
                )

        # MySQL reports 2 for a conflict update
        success = written > 0
        if success:
            self._sets += 1
        logger.debug(
            "Saved cache entry",
            extra={"key": mapped_key, "tags": tag_names, "ttl": ttl, "written": written},
        )
        return success

    def delete(self, key: str) -> bool:
        """Delete a single entry."""
        mapped_key = self.map_key(key)
        with self._executor.transaction("delete") as conn:
            conn.execute(delete(self._tags).where(self._tags.c.key == mapped_key))
            deleted = conn.execute(delete(self._records).where(self._records.c.key == mapped_key)).rowcount

        if deleted:
            self._deletes += 1
        return bool(deleted)

    def clean(self, tags: Iterable[str]) -> bool:
        """Remove every entry carrying any of the tags."""
        if isinstance(tags, str):
            tags = [tags]
        mapped_tags = [self.map_tag(tag) for tag in dict.fromkeys(tags)]
        if not mapped_tags:
            raise EmptyInputError("tags", "clean")

        records, tag_table = self._records, self._tags
        with self._executor.transaction("clean") as conn:
            keys = list(
                conn.execute(select(tag_table.c.key).where(tag_table.c.tag.in_(mapped_tags)).distinct()).scalars()
            )
            if not keys:
                return False
            conn.execute(delete(tag_table).where(tag_table.c.key.in_(keys)))
            removed = conn.execute(delete(records).where(records.c.key.in_(keys))).rowcount

        self._deletes += removed
        logger.info(
            "Cleaned %d cache entr(ies) by tag",
            removed,
            extra={"tags": mapped_tags, "removed": removed},
        )
        return removed > 0

    def flush(self, all: bool = False) -> bool:
        """
        Remove cached entries.

        all=False removes live entries only and reports whether any were
        removed. all=True empties both tables and reports success of execution.
        """
        records, tag_table = self._records, self._tags

        if all:
            with self._executor.transaction("flush_all") as conn:
                conn.execute(delete(tag_table))
                conn.execute(delete(records))
            logger.info("Flushed all cache entries", extra={"db_table": self._options.db_table})
            return True

        live = self._live(self._now())
        with self._executor.transaction("flush") as conn:
            conn.execute(delete(tag_table).where(tag_table.c.key.in_(select(records.c.key).where(live))))
            removed = conn.execute(delete(records).where(live)).rowcount

        logger.info(
            "Flushed %d live cache entr(ies)",
            removed,
            extra={"db_table": self._options.db_table, "removed": removed},
        )
        return removed > 0

    def purge(self, extra: int = 0) -> bool:
        """
        Physically remove entries expiring before now + extra seconds.

        Returns True once the statements have executed, even if nothing matched.
        """
        records, tag_table = self._records, self._tags
        cutoff = self._now() + int(extra or 0)
        expired = records.c.expires_at.is_not(None) & (records.c.expires_at < cutoff)

        with self._executor.transaction("purge") as conn:
            conn.execute(delete(tag_table).where(tag_table.c.key.in_(select(records.c.key).where(expired))))
            purged = conn.execute(delete(records).where(expired)).rowcount

        logger.info(
            "Purged %d expired cache entr(ies)",
            purged,
            extra={"db_table": self._options.db_table, "purged": purged, "cutoff": cutoff},
        )
        return True

    def exists(self, key: str) -> bool:
        """Check for a live entry, whatever its payload."""
        params = {"key": self.map_key(key), "now": self._now()}
        return self._executor.fetch_one("exists", self._exists_stmt, params) is not None

    def create_indexes(self) -> SqlCacheBackend:
        """
        Create the secondary indexes enabled in the options.

        Safe to call repeatedly; existing indexes are left alone.
        """
        for option, index in self._indexes.items():
            if not self.get_option(option):
                continue
            with self._executor.transaction("create_indexes") as conn:
                index.create(conn, checkfirst=True)
            logger.debug("Ensured index %s", index.name)

        return self

    def get_stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        size = self._executor.scalar(
            "get_stats",
            select(func.count()).select_from(self._records).where(self._live(self._now())),
        )
        total_requests = self._hits + self._misses
        hit_rate = (self._hits / total_requests * 100) if total_requests > 0 else 0.0

        return {
            "backend": "sql",
            "dialect": self._executor.engine.dialect.name,
            "db_table": self._options.db_table,
            "size": size,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(hit_rate, 2),
            "sets": self._sets,
            "deletes": self._deletes,
            "serializer": self._options.serializer.value,
        }

    def close(self) -> None:
        """Nothing to release: the Engine belongs to the caller."""
        logger.debug("SQL cache backend closed for table '%s'", self._options.db_table)
