"""
tagcache - Statement Executor

Thin synchronous layer between the cache and a SQLAlchemy Engine.

Each call checks out a connection for its own scope, executes, reads the
result and gives the connection back. Driver failures are logged and
re-raised as BackendExecutionError with the original exception chained.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any, NoReturn

from sqlalchemy import Connection, Engine, Row
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql.expression import Executable

from ..errors import BackendExecutionError

logger = logging.getLogger(__name__)

Params = Mapping[str, Any] | None


class StatementExecutor:
    """Runs statements against a caller-owned Engine."""

    def __init__(self, engine: Engine):
        self.engine = engine

    @contextmanager
    def transaction(self, operation: str) -> Iterator[Connection]:
        """
        Run several statements in one transaction.

        Commits on exit, rolls back if anything inside raises.
        """
        try:
            with self.engine.begin() as conn:
                yield conn
        except SQLAlchemyError as e:
            self._fail(operation, e)

    def fetch_one(self, operation: str, statement: Executable, params: Params = None) -> Row[Any] | None:
        with self.transaction(operation) as conn:
            return conn.execute(statement, params).first()

    def fetch_all(self, operation: str, statement: Executable, params: Params = None) -> list[Row[Any]]:
        with self.transaction(operation) as conn:
            return list(conn.execute(statement, params).all())

    def scalar(self, operation: str, statement: Executable, params: Params = None) -> Any:
        with self.transaction(operation) as conn:
            return conn.execute(statement, params).scalar()

    def _fail(self, operation: str, error: SQLAlchemyError) -> NoReturn:
        logger.error(
            f"Statement failed during '{operation}': {error}",
            extra={"operation": operation, "dialect": self.engine.dialect.name, "error": str(error)},
            exc_info=True,
        )
        raise BackendExecutionError(
            operation,
            details={"dialect": self.engine.dialect.name, "error": str(error)},
        ) from error
