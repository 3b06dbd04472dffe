"""
Domain models for the account store.

Defines the record shapes aligned with the `accountsettings` and
`transaction_history` tables. Rows read from the backend are validated into
these models before they leave the repositories.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, NamedTuple, Optional
from uuid import UUID

from pydantic import BaseModel, Field

PENDING_STATUS = "Pending..."


class Account(BaseModel):
    """
    Representation of a single row in the `accountsettings` table.
    """

    id: int = Field(..., alias="account_id", description="Primary key (SERIAL).")
    username: str = Field(..., description="Unique login name.")
    email: str = Field(..., description="Unique email address.")
    password_hash: str = Field(
        ..., alias="password", min_length=1, repr=False, description="One-way password digest."
    )
    email_verified: bool = Field(False, description="Whether the email was confirmed.")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
    }


class TransactionRecord(BaseModel):
    """
    Representation of a single row in the `transaction_history` table.
    """

    transaction_id: UUID = Field(..., description="Backend-generated identifier.")
    client_id: str = Field(..., description="Opaque correlation key for the client.")
    transaction_type: str = Field(..., description="Free-form tag, e.g. 'purchase'.")
    items_sent: Optional[Dict[str, Any]] = Field(None, description="JSONB payload.")
    items_received: Optional[Dict[str, Any]] = Field(None, description="JSONB payload.")
    notes: Optional[str] = Field(None, description="Free text.")
    status: str = Field(PENDING_STATUS, description="Workflow status.")
    recorded_at: Optional[datetime] = Field(None, description="Server-side insertion time.")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
    }


class CredentialCheck(NamedTuple):
    """Outcome of a username/password validation."""

    credentials_valid: bool
    email_verified: bool


__all__ = ["Account", "TransactionRecord", "CredentialCheck", "PENDING_STATUS"]
