"""
Database connection factory utilities for the account store.

Builds the PostgreSQL DSN from settings, constructs the connection pool the
storage backend draws from, and applies per-transaction statement timeouts.

Includes retry logic for transient connection failures during pool start-up
using tenacity. Individual queries are never retried here.
"""

from __future__ import annotations

import math
from typing import Dict, Optional
from urllib.parse import urlencode

import psycopg
from psycopg_pool import ConnectionPool, PoolTimeout
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from account_store.config import Settings, get_settings
from account_store.utils.logging import get_logger

log = get_logger(__name__)


def _socket_options(deadline: float) -> Dict[str, int]:
    """
    libpq options that make a dead peer fail within roughly one deadline.

    `statement_timeout` is enforced by the server, so a partitioned network
    would otherwise leave the client blocked on its socket.
    """
    seconds = max(1, math.ceil(deadline))
    return {
        "connect_timeout": max(2, seconds),
        "keepalives": 1,
        "keepalives_idle": seconds,
        "keepalives_interval": 1,
        "keepalives_count": 3,
        "tcp_user_timeout": int(deadline * 1000),
    }


def build_dsn(settings: Optional[Settings] = None) -> str:
    """Compose a DSN string from settings."""
    settings = settings or get_settings()
    return (
        f"postgresql://{settings.db_user}:{settings.db_password}"
        f"@{settings.db_host}:{settings.db_port}/{settings.db_name}"
        f"?{urlencode(_socket_options(settings.db_call_timeout_seconds))}"
    )


def _open_once(dsn: str, min_size: int, max_size: int, timeout: float) -> ConnectionPool:
    pool = ConnectionPool(
        conninfo=dsn,
        min_size=min_size,
        max_size=max_size,
        open=False,
    )
    try:
        pool.open(wait=True, timeout=timeout)
    except BaseException:
        pool.close()
        raise
    return pool


def open_pool(
    dsn: str,
    min_size: int = 1,
    max_size: int = 10,
    timeout: float = 5.0,
    attempts: int = 3,
) -> ConnectionPool:
    """
    Open a connection pool, retrying transient start-up failures.

    Parameters
    ----------
    dsn : str
        PostgreSQL connection string.
    min_size : int
        Minimum number of idle connections to keep.
    max_size : int
        Maximum total connections in the pool.
    timeout : float
        Seconds to wait for `min_size` connections on each attempt.
    attempts : int
        Total attempts before giving up.

    Returns
    -------
    ConnectionPool
        An opened pool.

    Raises
    ------
    psycopg_pool.PoolTimeout
        If the pool could not be filled after all retry attempts.
    """
    retrying = Retrying(
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type((PoolTimeout, psycopg.OperationalError)),
        before_sleep=lambda state: log.warning(
            "Connection pool start-up failed, retrying",
            extra={"attempt": state.attempt_number},
        ),
        reraise=True,
    )
    pool = retrying(_open_once, dsn, min_size, max_size, timeout)
    log.info("Connection pool opened", extra={"min_size": min_size, "max_size": max_size})
    return pool


def apply_statement_timeout(cur: psycopg.Cursor, timeout_ms: int) -> None:
    """
    Bound every following statement in the current transaction.

    A non-positive `timeout_ms` leaves the server default in place.
    """
    if timeout_ms <= 0:
        return
    cur.execute("SELECT set_config('statement_timeout', %s, true)", (str(int(timeout_ms)),))


__all__ = [
    "build_dsn",
    "open_pool",
    "apply_statement_timeout",
]
