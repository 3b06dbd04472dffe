from __future__ import annotations

import pytest

from account_store.domain.errors import InfrastructureError, SchemaError
from account_store.infrastructure.schema import SCHEMA_STATEMENTS, ensure_schema


def test_ensure_schema_creates_both_tables(fake_backend) -> None:
    ensure_schema(fake_backend)

    executed = [sql for sql, _, _ in fake_backend.calls]
    assert executed == list(SCHEMA_STATEMENTS)
    assert "accountsettings" in executed[0]
    assert "transaction_history" in executed[1]


def test_ensure_schema_is_repeatable(fake_backend) -> None:
    ensure_schema(fake_backend)
    ensure_schema(fake_backend)

    assert all("IF NOT EXISTS" in sql for sql, _, _ in fake_backend.calls)


def test_schema_declares_uniqueness_and_pending_default() -> None:
    accounts_ddl, transactions_ddl = SCHEMA_STATEMENTS
    assert "username TEXT NOT NULL UNIQUE" in accounts_ddl
    assert "email TEXT NOT NULL UNIQUE" in accounts_ddl
    assert "email_verified BOOLEAN DEFAULT FALSE" in accounts_ddl
    assert "DEFAULT gen_random_uuid()" in transactions_ddl
    assert "DEFAULT 'Pending...'" in transactions_ddl


def test_backend_rejection_raises_schema_error_once(fake_backend) -> None:
    fake_backend.fail_with = InfrastructureError("permission denied for schema public")

    with pytest.raises(SchemaError, match="permission denied") as excinfo:
        ensure_schema(fake_backend)

    assert isinstance(excinfo.value.__cause__, InfrastructureError)
    assert len(fake_backend.calls) == 1


def test_transaction_history_records_insertion_time() -> None:
    _, transactions_ddl = SCHEMA_STATEMENTS
    assert "recorded_at TIMESTAMPTZ NOT NULL DEFAULT now()" in transactions_ddl
