"""
Transaction recorder: append-only writes to `transaction_history`.

Rows are inserted with status 'Pending...' and an id generated by
PostgreSQL. Status changes belong to an external workflow; this module only
appends and reads.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional
from uuid import UUID

from psycopg.types.json import Jsonb

from account_store.domain.errors import NotFoundError
from account_store.domain.models import PENDING_STATUS, TransactionRecord
from account_store.infrastructure.backend import StorageBackend
from account_store.utils.logging import get_logger

log = get_logger(__name__)

INSERT_TRANSACTION_SQL = """
INSERT INTO transaction_history
    (client_id, transaction_type, items_sent, items_received, notes, status)
VALUES (%s, %s, %s, %s, %s, %s)
RETURNING transaction_id
"""

SELECT_TRANSACTION_SQL = """
SELECT transaction_id, client_id, transaction_type, items_sent, items_received, notes, status,
       recorded_at
FROM transaction_history
WHERE transaction_id = %s
"""

SELECT_CLIENT_TRANSACTIONS_SQL = """
SELECT transaction_id, client_id, transaction_type, items_sent, items_received, notes, status,
       recorded_at
FROM transaction_history
WHERE client_id = %s
ORDER BY recorded_at, transaction_id
"""


def _json(payload: Optional[Mapping[str, Any]]) -> Optional[Jsonb]:
    return None if payload is None else Jsonb(dict(payload))


class TransactionRecorder:
    """
    Append and read transaction history rows.

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

    def record(
        self,
        client_id: str,
        transaction_type: str,
        items_sent: Optional[Mapping[str, Any]],
        items_received: Optional[Mapping[str, Any]],
        notes: Optional[str] = None,
    ) -> UUID:
        """
        Append a pending transaction and return its generated id.

        Item payloads are stored as JSONB without structural validation.
        """
        row = self._backend.query_row(
            INSERT_TRANSACTION_SQL,
            (
                client_id,
                transaction_type,
                _json(items_sent),
                _json(items_received),
                notes,
                PENDING_STATUS,
            ),
            self.deadline,
        )
        transaction_id = row["transaction_id"]
        if not isinstance(transaction_id, UUID):
            transaction_id = UUID(str(transaction_id))
        log.info(
            "Transaction recorded",
            extra={
                "transaction_id": str(transaction_id),
                "client_id": client_id,
                "transaction_type": transaction_type,
            },
        )
        return transaction_id

    def get(self, transaction_id: UUID) -> TransactionRecord:
        try:
            row = self._backend.query_row(SELECT_TRANSACTION_SQL, (transaction_id,), self.deadline)
        except NotFoundError:
            raise NotFoundError(f"No transaction with id '{transaction_id}'") from None
        return TransactionRecord.model_validate(row)

    def list_for_client(self, client_id: str) -> List[TransactionRecord]:
        rows = self._backend.query_all(SELECT_CLIENT_TRANSACTIONS_SQL, (client_id,), self.deadline)
        return [TransactionRecord.model_validate(row) for row in rows]


__all__ = ["TransactionRecorder"]
