"""
Account Store - PostgreSQL persistence for user accounts and transaction history.

This package provides:

- An account repository with unique usernames and emails
- bcrypt password hashing behind a swappable interface
- Credential validation that separates "unknown user" from "wrong password"
- An append-only transaction recorder
- A pooled storage backend with per-call deadlines

Construct a backend once and pass it to the repositories; there is no
module-level connection state.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from account_store.auth import BcryptHasher, CredentialHasher, CredentialValidator
from account_store.config import Settings, get_settings
from account_store.domain import (
    Account,
    AccountStoreError,
    CredentialCheck,
    DuplicateError,
    InfrastructureError,
    NotFoundError,
    SchemaError,
    StorageTimeoutError,
    TransactionRecord,
)
from account_store.infrastructure import PostgresBackend, StorageBackend, ensure_schema
from account_store.repositories import AccountRepository, TransactionRecorder
from account_store.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "Account",
    "CredentialCheck",
    "TransactionRecord",
    # Errors
    "AccountStoreError",
    "DuplicateError",
    "InfrastructureError",
    "NotFoundError",
    "SchemaError",
    "StorageTimeoutError",
    # Storage
    "PostgresBackend",
    "StorageBackend",
    "ensure_schema",
    # Repositories
    "AccountRepository",
    "TransactionRecorder",
    # Credentials
    "BcryptHasher",
    "CredentialHasher",
    "CredentialValidator",
    # Logging
    "configure_logging",
    "get_logger",
]
