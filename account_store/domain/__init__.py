"""
Domain package for the account store.

Exports the record models and the error taxonomy shared by the repositories,
the credential validator, and the storage backend.
"""

from account_store.domain.errors import (
    AccountStoreError,
    DuplicateError,
    InfrastructureError,
    NotFoundError,
    SchemaError,
    StorageTimeoutError,
)
from account_store.domain.models import (
    PENDING_STATUS,
    Account,
    CredentialCheck,
    TransactionRecord,
)

__all__ = [
    "Account",
    "CredentialCheck",
    "TransactionRecord",
    "PENDING_STATUS",
    "AccountStoreError",
    "DuplicateError",
    "InfrastructureError",
    "NotFoundError",
    "SchemaError",
    "StorageTimeoutError",
]
