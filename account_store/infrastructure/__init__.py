"""
Infrastructure package for the account store.

Centralizes database connectivity concerns (DSN, pooling, the storage
backend contract, and schema bootstrap). Keep this layer focused on I/O and
resource management, decoupled from the repositories.
"""

from account_store.infrastructure.backend import PostgresBackend, StorageBackend
from account_store.infrastructure.db_factory import (
    apply_statement_timeout,
    build_dsn,
    open_pool,
)
from account_store.infrastructure.schema import ensure_schema

__all__ = [
    "PostgresBackend",
    "StorageBackend",
    "apply_statement_timeout",
    "build_dsn",
    "ensure_schema",
    "open_pool",
]
