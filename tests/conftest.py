"""
Pytest configuration for the account store.

Provides fixtures for:
- An in-memory storage backend that understands the repository statements
- A fast bcrypt hasher
- Database connection management and table cleanup for integration tests
"""

from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Generator, List, Optional, Sequence
from uuid import UUID, uuid4

import psycopg
import pytest

from account_store.auth.hasher import BcryptHasher
from account_store.config import Settings
from account_store.domain.errors import DuplicateError, NotFoundError
from account_store.infrastructure import schema
from account_store.infrastructure.backend import PostgresBackend
from account_store.infrastructure.db_factory import open_pool
from account_store.repositories import accounts, transactions

FAST_BCRYPT_ROUNDS = 4


class FakeStorageBackend:
    """
    In-memory StorageBackend for unit tests.

    Recognizes exactly the statements the repositories and the schema
    initializer issue, and enforces the same unique constraints as the
    real tables.
    """

    def __init__(self) -> None:
        self.accounts: List[Dict[str, Any]] = []
        self.transactions: Dict[UUID, Dict[str, Any]] = {}
        self.calls: List[tuple] = []
        self.fail_with: Optional[Exception] = None
        self._next_account_id = 1
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def _enter(self, sql: str, params: Sequence[Any], deadline: Optional[float]) -> None:
        self.calls.append((sql, tuple(params), deadline))
        if self.fail_with is not None:
            raise self.fail_with

    def _tick(self) -> datetime:
        self._clock += timedelta(microseconds=1)
        return self._clock

    def _find(self, username: str) -> Optional[Dict[str, Any]]:
        for row in self.accounts:
            if row["username"] == username:
                return row
        return None

    def _check_unique(self, field: str, value: str, skip: Optional[Dict[str, Any]] = None) -> None:
        for row in self.accounts:
            if row is not skip and row[field] == value:
                raise DuplicateError(field)

    def execute(self, sql: str, params: Sequence[Any] = (), deadline: Optional[float] = None) -> int:
        self._enter(sql, params, deadline)
        if sql in schema.SCHEMA_STATEMENTS:
            return 0
        if sql == accounts.UPDATE_ACCOUNT_SQL:
            new_username, new_email, username = params
            row = self._find(username)
            if row is None:
                return 0
            if new_username is not None:
                self._check_unique("username", new_username, skip=row)
            if new_email is not None:
                self._check_unique("email", new_email, skip=row)
            row["username"] = new_username if new_username is not None else row["username"]
            row["email"] = new_email if new_email is not None else row["email"]
            return 1
        if sql == accounts.VERIFY_EMAIL_SQL:
            (username,) = params
            row = self._find(username)
            if row is None:
                return 0
            row["email_verified"] = True
            return 1
        raise AssertionError(f"unexpected statement: {sql}")

    def query_row(
        self, sql: str, params: Sequence[Any] = (), deadline: Optional[float] = None
    ) -> Dict[str, Any]:
        self._enter(sql, params, deadline)
        if sql == accounts.INSERT_ACCOUNT_SQL:
            username, password, email = params
            self._check_unique("username", username)
            self._check_unique("email", email)
            row = {
                "account_id": self._next_account_id,
                "username": username,
                "email": email,
                "password": password,
                "email_verified": False,
            }
            self._next_account_id += 1
            self.accounts.append(row)
            return {"account_id": row["account_id"]}
        if sql == accounts.SELECT_ACCOUNT_SQL:
            (username,) = params
            row = self._find(username)
            if row is None:
                raise NotFoundError("No row matched the query")
            return dict(row)
        if sql == transactions.INSERT_TRANSACTION_SQL:
            client_id, transaction_type, sent, received, notes, status = params
            transaction_id = uuid4()
            self.transactions[transaction_id] = {
                "transaction_id": transaction_id,
                "client_id": client_id,
                "transaction_type": transaction_type,
                "items_sent": None if sent is None else sent.obj,
                "items_received": None if received is None else received.obj,
                "notes": notes,
                "status": status,
                "recorded_at": self._tick(),
            }
            return {"transaction_id": transaction_id}
        if sql == transactions.SELECT_TRANSACTION_SQL:
            (transaction_id,) = params
            if transaction_id not in self.transactions:
                raise NotFoundError("No row matched the query")
            return dict(self.transactions[transaction_id])
        raise AssertionError(f"unexpected query: {sql}")

    def query_all(
        self, sql: str, params: Sequence[Any] = (), deadline: Optional[float] = None
    ) -> List[Dict[str, Any]]:
        self._enter(sql, params, deadline)
        if sql == accounts.SELECT_ALL_ACCOUNTS_SQL:
            return [dict(row) for row in sorted(self.accounts, key=lambda r: r["account_id"])]
        if sql == transactions.SELECT_CLIENT_TRANSACTIONS_SQL:
            (client_id,) = params
            mine = [row for row in self.transactions.values() if row["client_id"] == client_id]
            mine.sort(key=lambda r: (r["recorded_at"], r["transaction_id"]))
            return [dict(row) for row in mine]
        raise AssertionError(f"unexpected query: {sql}")


@pytest.fixture
def fake_backend() -> FakeStorageBackend:
    return FakeStorageBackend()


@pytest.fixture(scope="session")
def hasher() -> BcryptHasher:
    """bcrypt at the minimum cost so unit tests stay fast."""
    return BcryptHasher(rounds=FAST_BCRYPT_ROUNDS)


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "accounts"),
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    return (
        f"postgresql://{test_settings.db_user}:{test_settings.db_password}"
        f"@{test_settings.db_host}:{test_settings.db_port}/{test_settings.db_name}"
    )


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except psycopg.Error:
        return False


@pytest.fixture(scope="session")
def pg_backend(
    test_dsn: str, db_connection_available: bool
) -> Generator[PostgresBackend, None, None]:
    """
    Provide a session-scoped pooled backend with the schema in place.

    Skips tests if database is not available.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    backend = PostgresBackend(open_pool(test_dsn, min_size=1, max_size=4, attempts=1))
    try:
        schema.ensure_schema(backend)
        yield backend
    finally:
        backend.close()


@pytest.fixture(scope="function")
def clean_tables(pg_backend: PostgresBackend) -> Generator[PostgresBackend, None, None]:
    """
    Empty both tables before and after each test function.
    """
    truncate = "TRUNCATE TABLE accountsettings, transaction_history RESTART IDENTITY;"
    pg_backend.execute(truncate)
    yield pg_backend
    pg_backend.execute(truncate)
