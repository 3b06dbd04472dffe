"""
Credential handling for the account store: password hashing and login
validation.
"""

from account_store.auth.hasher import BcryptHasher, CredentialHasher
from account_store.auth.validator import CredentialValidator

__all__ = [
    "BcryptHasher",
    "CredentialHasher",
    "CredentialValidator",
]
