"""
Exception taxonomy for the account store.

Every failure the core reports is one of these types. Driver exceptions are
translated at the storage backend boundary and chained as ``__cause__``.
"""

from __future__ import annotations

from typing import Optional


class AccountStoreError(Exception):
    """Base exception for account store errors."""


class DuplicateError(AccountStoreError):
    """A uniqueness constraint was violated."""

    def __init__(self, field: Optional[str], message: Optional[str] = None) -> None:
        self.field = field
        super().__init__(message or f"An account with this {field or 'value'} already exists")


class NotFoundError(AccountStoreError):
    """No row matched the lookup."""


class StorageTimeoutError(AccountStoreError, TimeoutError):
    """The backend did not answer within the call deadline."""


class SchemaError(AccountStoreError):
    """The backend rejected the table definitions."""


class InfrastructureError(AccountStoreError):
    """Unclassified backend failure."""


__all__ = [
    "AccountStoreError",
    "DuplicateError",
    "NotFoundError",
    "StorageTimeoutError",
    "SchemaError",
    "InfrastructureError",
]
