"""
Repositories package for the account store.

Re-exports the account repository and the transaction recorder so callers
can import from `account_store.repositories` directly.
"""

from account_store.repositories.accounts import AccountRepository
from account_store.repositories.transactions import TransactionRecorder

__all__ = [
    "AccountRepository",
    "TransactionRecorder",
]
