"""
Storage backend contract and its PostgreSQL implementation.

The repositories talk to the database only through the `StorageBackend`
protocol: parameterized SQL plus a per-call deadline. `PostgresBackend`
fulfils it on top of a psycopg `ConnectionPool` and translates driver
exceptions into the account store error taxonomy. Rows come back as
dicts whatever row factory the pool was configured with.
"""

from __future__ import annotations

import time
from typing import (
    Any,
    Callable,
    Dict,
    List,
    Optional,
    Protocol,
    Sequence,
    TypeVar,
    runtime_checkable,
)

import psycopg
from psycopg import errors as pg_errors
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool, PoolTimeout

from account_store.config import Settings, get_settings
from account_store.domain.errors import (
    DuplicateError,
    InfrastructureError,
    NotFoundError,
    StorageTimeoutError,
)
from account_store.infrastructure.db_factory import (
    apply_statement_timeout,
    build_dsn,
    open_pool,
)
from account_store.utils.logging import get_logger

log = get_logger(__name__)

Row = Dict[str, Any]
Params = Sequence[Any]
T = TypeVar("T")


@runtime_checkable
class StorageBackend(Protocol):
    """
    Narrow interface the repositories consume.

    `deadline` is a budget in seconds for the whole call. None means the
    backend's configured default.
    """

    def execute(self, sql: str, params: Params = (), deadline: Optional[float] = None) -> int:
        """Run a statement and return the number of affected rows."""
        ...

    def query_row(self, sql: str, params: Params = (), deadline: Optional[float] = None) -> Row:
        """Return the first row, or raise NotFoundError when there is none."""
        ...

    def query_all(
        self, sql: str, params: Params = (), deadline: Optional[float] = None
    ) -> List[Row]:
        """Return every row the statement produces."""
        ...


def _duplicate_field(diag: Any) -> Optional[str]:
    """
    Derive the offending column from a PostgreSQL unique constraint name.

    Constraints declared inline as `UNIQUE` are named `<table>_<column>_key`.
    """
    name = getattr(diag, "constraint_name", None)
    if not name:
        return None
    table = getattr(diag, "table_name", None)
    if table and name.startswith(f"{table}_"):
        name = name[len(table) + 1 :]
    if name.endswith("_key"):
        name = name[: -len("_key")]
    return name


class PostgresBackend(StorageBackend):
    """
    Storage backend that runs each call in its own pooled transaction.

    The deadline covers both the wait for a pooled connection and the
    statement itself, which is bounded with a transaction-scoped
    `statement_timeout` set to whatever budget remains after checkout.
    """

    def __init__(self, pool: ConnectionPool, default_deadline: float = 5.0) -> None:
        self._pool = pool
        self.default_deadline = default_deadline

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "PostgresBackend":
        """Open a pool from settings and wrap it."""
        settings = settings or get_settings()
        pool = open_pool(
            build_dsn(settings),
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            timeout=settings.db_call_timeout_seconds,
            attempts=settings.db_connect_attempts,
        )
        return cls(pool, default_deadline=settings.db_call_timeout_seconds)

    def _run(
        self,
        sql: str,
        params: Params,
        deadline: Optional[float],
        consume: Callable[[psycopg.Cursor], T],
    ) -> T:
        budget = self.default_deadline if deadline is None else deadline
        started = time.monotonic()
        try:
            with self._pool.connection(timeout=budget) as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    remaining = budget - (time.monotonic() - started)
                    if remaining <= 0:
                        raise StorageTimeoutError(
                            f"Deadline of {budget}s spent waiting for a connection"
                        )
                    apply_statement_timeout(cur, max(1, int(remaining * 1000)))
                    cur.execute(sql, params)
                    return consume(cur)
        except pg_errors.UniqueViolation as exc:
            raise DuplicateError(_duplicate_field(exc.diag)) from exc
        except (pg_errors.QueryCanceled, PoolTimeout) as exc:
            log.warning("Storage call exceeded deadline", extra={"deadline_seconds": budget})
            raise StorageTimeoutError(f"Storage call exceeded deadline of {budget}s") from exc
        except psycopg.Error as exc:
            log.error("Storage call failed", extra={"error_type": type(exc).__name__})
            raise InfrastructureError(f"Storage call failed: {exc}") from exc

    def execute(self, sql: str, params: Params = (), deadline: Optional[float] = None) -> int:
        return self._run(sql, params, deadline, lambda cur: cur.rowcount)

    def query_row(self, sql: str, params: Params = (), deadline: Optional[float] = None) -> Row:
        def _first(cur: psycopg.Cursor) -> Row:
            row = cur.fetchone()
            if row is None:
                raise NotFoundError("No row matched the query")
            return row

        return self._run(sql, params, deadline, _first)

    def query_all(
        self, sql: str, params: Params = (), deadline: Optional[float] = None
    ) -> List[Row]:
        return self._run(sql, params, deadline, lambda cur: cur.fetchall())

    def close(self) -> None:
        """Close the pool and release its connections."""
        self._pool.close()
        log.info("Connection pool closed")

    def __enter__(self) -> "PostgresBackend":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        del exc_type, exc, tb
        self.close()


__all__ = ["StorageBackend", "PostgresBackend", "Row"]
