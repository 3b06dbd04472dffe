"""
Credential validation: does this username/password pair match, and is the
account's email verified?

An unknown username and a wrong password are ordinary outcomes reported as
False, never as exceptions. Only infrastructure failures propagate.
"""

from __future__ import annotations

from account_store.auth.hasher import CredentialHasher
from account_store.domain.errors import NotFoundError
from account_store.domain.models import CredentialCheck
from account_store.repositories.accounts import AccountRepository
from account_store.utils.logging import get_logger

log = get_logger(__name__)


class CredentialValidator:
    """
    Combine the account repository with a credential hasher.

    Parameters
    ----------
    accounts : AccountRepository
        Source of stored digests and verification flags.
    hasher : CredentialHasher
        Verifies a plaintext password against a stored digest.
    """

    def __init__(self, accounts: AccountRepository, hasher: CredentialHasher) -> None:
        self._accounts = accounts
        self._hasher = hasher
        # verified against for unknown usernames
        self._dummy_digest = hasher.hash("account-store-timing-equalizer")

    def validate(self, username: str, plaintext_password: str) -> CredentialCheck:
        """
        Check a login attempt.

        Returns
        -------
        CredentialCheck
            `(False, False)` for an unknown username. Otherwise the password
            check result together with the account's `email_verified` flag,
            which is reported even when the password is wrong.
        """
        try:
            account = self._accounts.get_by_username(username)
        except NotFoundError:
            self._hasher.verify(plaintext_password, self._dummy_digest)
            log.info("Login rejected: unknown username", extra={"username": username})
            return CredentialCheck(credentials_valid=False, email_verified=False)

        valid = self._hasher.verify(plaintext_password, account.password_hash)
        if not valid:
            log.info("Login rejected: wrong password", extra={"username": username})
        return CredentialCheck(credentials_valid=valid, email_verified=account.email_verified)


__all__ = ["CredentialValidator"]
