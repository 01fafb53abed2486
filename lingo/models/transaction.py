"""Transaction history models."""

from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

TransactionType = Literal["send", "receive", "swap", "bridge", "claim"]
TransactionStatus = Literal["pending", "confirmed", "failed"]


class TransactionRecord(BaseModel):
    """Core ledger entry. Maps 1:1 to transaction_history table."""

    id: UUID
    wallet_address: str
    type: TransactionType
    status: TransactionStatus
    tx_hash: str | None = None
    token_in: str | None = None
    token_out: str | None = None
    amount_in: str | None = None
    amount_out: str | None = None
    counterparty_address: str | None = None
    counterparty_phone: str | None = None
    chain: str = "base"
    description: str | None = None
    language: str = "en"
    original_command: str | None = None
    error_message: str | None = None
    created_at: datetime
    confirmed_at: datetime | None = None


class NewTransaction(BaseModel):
    """What the pipeline hands the history store to create a pending row."""

    wallet_address: str
    type: TransactionType
    token_in: str | None = None
    token_out: str | None = None
    amount_in: str | None = None
    amount_out: str | None = None
    counterparty_address: str | None = None
    counterparty_phone: str | None = None
    chain: str = "base"
    description: str | None = None
    language: str = "en"
    original_command: str | None = None


class RecordTransactionRequest(BaseModel):
    """Request body for POST /api/transactions/record."""

    model_config = {"extra": "forbid"}

    action: Literal["create", "update_status"]
    transaction: NewTransaction | None = None
    transaction_id: UUID | None = None
    status: TransactionStatus | None = None
    tx_hash: str | None = None
    error_message: str | None = Field(default=None, max_length=500)
    plan_id: str | None = Field(default=None, max_length=64)


class TransactionStats(BaseModel):
    """Per-wallet counts for the history screen."""

    total_sent: int = 0
    total_received: int = 0
    total_swaps: int = 0
    pending_count: int = 0
