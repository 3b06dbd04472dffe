"""
Schema bootstrap for the account store.

Creates the `accountsettings` and `transaction_history` tables when they do
not exist yet. Safe to run on every start-up.
"""

from __future__ import annotations

from typing import Optional

from account_store.domain.errors import AccountStoreError, SchemaError
from account_store.infrastructure.backend import StorageBackend
from account_store.utils.logging import get_logger

log = get_logger(__name__)

CREATE_ACCOUNTS_TABLE = """
CREATE TABLE IF NOT EXISTS accountsettings (
    account_id SERIAL PRIMARY KEY,
    username TEXT NOT NULL UNIQUE,
    email TEXT NOT NULL UNIQUE,
    password TEXT NOT NULL,
    email_verified BOOLEAN DEFAULT FALSE
);
"""

CREATE_TRANSACTIONS_TABLE = """
CREATE TABLE IF NOT EXISTS transaction_history (
    transaction_id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    client_id TEXT NOT NULL,
    transaction_type TEXT NOT NULL,
    items_sent JSONB,
    items_received JSONB,
    notes TEXT,
    status TEXT DEFAULT 'Pending...',
    recorded_at TIMESTAMPTZ NOT NULL DEFAULT now()
);
"""

SCHEMA_STATEMENTS = (CREATE_ACCOUNTS_TABLE, CREATE_TRANSACTIONS_TABLE)


def ensure_schema(backend: StorageBackend, deadline: Optional[float] = None) -> None:
    """
    Create the account store tables if absent.

    Raises
    ------
    SchemaError
        If the backend rejects a definition. Start-up should not continue.
    """
    for statement in SCHEMA_STATEMENTS:
        try:
            backend.execute(statement, (), deadline)
        except AccountStoreError as exc:
            log.error("Schema initialization failed", extra={"error_type": type(exc).__name__})
            raise SchemaError(f"Failed to initialize account store schema: {exc}") from exc
    log.info("Schema ready", extra={"tables": ["accountsettings", "transaction_history"]})


__all__ = ["ensure_schema", "SCHEMA_STATEMENTS"]
