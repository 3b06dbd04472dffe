"""
Password hashing for the account store.

The repositories never see plaintext passwords; callers hash with a
`CredentialHasher` first. `BcryptHasher` is the default implementation.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import bcrypt

DEFAULT_ROUNDS = 10


@runtime_checkable
class CredentialHasher(Protocol):
    """Salted one-way hash with verification."""

    def hash(self, plaintext: str) -> str:
        ...

    def verify(self, plaintext: str, digest: str) -> bool:
        ...


class BcryptHasher(CredentialHasher):
    """
    bcrypt with a random salt per call.

    Parameters
    ----------
    rounds : int
        Log2 cost factor passed to `bcrypt.gensalt`.
    """

    def __init__(self, rounds: int = DEFAULT_ROUNDS) -> None:
        self.rounds = rounds

    def hash(self, plaintext: str) -> str:
        return bcrypt.hashpw(plaintext.encode(), bcrypt.gensalt(rounds=self.rounds)).decode()

    def verify(self, plaintext: str, digest: str) -> bool:
        try:
            return bcrypt.checkpw(plaintext.encode(), digest.encode())
        except ValueError:
            # malformed digest or over-long password
            return False


__all__ = ["CredentialHasher", "BcryptHasher", "DEFAULT_ROUNDS"]
