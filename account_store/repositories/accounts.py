"""
Account repository: create, read, and update rows in `accountsettings`.

Each public method is one backend round-trip bounded by the repository
deadline. Uniqueness is enforced by the table's UNIQUE constraints and
surfaces as `DuplicateError`; nothing here locks or retries.
"""

from __future__ import annotations

from typing import List, Optional

from account_store.domain.errors import NotFoundError
from account_store.domain.models import Account
from account_store.infrastructure.backend import StorageBackend
from account_store.utils.logging import get_logger

log = get_logger(__name__)

INSERT_ACCOUNT_SQL = """
INSERT INTO accountsettings (username, password, email)
VALUES (%s, %s, %s)
RETURNING account_id
"""

SELECT_ACCOUNT_SQL = """
SELECT account_id, username, email, password, email_verified
FROM accountsettings
WHERE username = %s
"""

SELECT_ALL_ACCOUNTS_SQL = """
SELECT account_id, username, email, password, email_verified
FROM accountsettings
ORDER BY account_id
"""

UPDATE_ACCOUNT_SQL = """
UPDATE accountsettings
SET username = COALESCE(%s, username), email = COALESCE(%s, email)
WHERE username = %s
"""

VERIFY_EMAIL_SQL = """
UPDATE accountsettings SET email_verified = TRUE WHERE username = %s
"""


class AccountRepository:
    """
    Persistence operations over `accountsettings`.

    Parameters
    ----------
    backend : StorageBackend
        Pooled backend shared with the other repositories.
    deadline : float, optional
        Seconds each call may take before it fails with StorageTimeoutError.
        None defers to the backend default.
    """

    def __init__(self, backend: StorageBackend, deadline: Optional[float] = None) -> None:
        self._backend = backend
        self.deadline = deadline

    def create(self, username: str, password_digest: str, email: str) -> int:
        """
        Insert a new account and return its id.

        `password_digest` must already be the output of a CredentialHasher.

        Raises
        ------
        DuplicateError
            If the username or email is taken; `field` names which one.
        """
        row = self._backend.query_row(
            INSERT_ACCOUNT_SQL, (username, password_digest, email), self.deadline
        )
        account_id = int(row["account_id"])
        log.info("Account created", extra={"account_id": account_id, "username": username})
        return account_id

    def get_by_username(self, username: str) -> Account:
        """Fetch an account, raising NotFoundError when the username is unknown."""
        try:
            row = self._backend.query_row(SELECT_ACCOUNT_SQL, (username,), self.deadline)
        except NotFoundError:
            raise NotFoundError(f"No account with username '{username}'") from None
        return Account.model_validate(row)

    def list_accounts(self) -> List[Account]:
        rows = self._backend.query_all(SELECT_ALL_ACCOUNTS_SQL, (), self.deadline)
        return [Account.model_validate(row) for row in rows]

    def update(
        self,
        username: str,
        new_username: Optional[str] = None,
        new_email: Optional[str] = None,
    ) -> None:
        """
        Change the username and/or email of an account.

        A None argument leaves that column untouched; passing both as None
        only checks that the account exists.
        """
        affected = self._backend.execute(
            UPDATE_ACCOUNT_SQL, (new_username, new_email, username), self.deadline
        )
        if affected == 0:
            raise NotFoundError(f"No account with username '{username}'")
        log.info(
            "Account updated",
            extra={
                "username": username,
                "username_changed": new_username is not None,
                "email_changed": new_email is not None,
            },
        )

    def mark_email_verified(self, username: str) -> None:
        """Flag the account's email as verified. Repeat calls succeed."""
        affected = self._backend.execute(VERIFY_EMAIL_SQL, (username,), self.deadline)
        if affected == 0:
            raise NotFoundError(f"No account with username '{username}'")
        log.info("Email verified", extra={"username": username})


__all__ = ["AccountRepository"]
