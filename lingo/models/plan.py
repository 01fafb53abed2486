"""Transaction plan models: what the planner builds and the executor sends."""

from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

from lingo.models.recipient import ResolvedRecipient

PlanKind = Literal["native_transfer", "erc20_transfer", "swap", "bridge"]


class TxRequest(BaseModel):
    """A ready-to-send EVM transaction."""

    to: str
    data: str = "0x"
    value: int = 0
    gas_limit: int | None = None


class SwapQuote(BaseModel):
    """Parsed response from the routing service."""

    from_token: str
    to_token: str
    from_amount: str
    to_amount: str
    to_amount_min: str
    estimated_gas: str = "0"
    route: str = "LI.FI"
    transaction_request: TxRequest


class ApprovalRequirement(BaseModel):
    """ERC-20 allowance that must be in place before the plan's transaction."""

    token_address: str
    spender: str
    amount: int


class TransactionPlan(BaseModel):
    """Executable descriptor built from a resolved intent."""

    kind: PlanKind
    chain: str
    to_chain: str | None = None
    token: str
    to_token: str | None = None
    amount: str
    amount_smallest_unit: int
    recipient: ResolvedRecipient | None = None
    tx: TxRequest
    quote: SwapQuote | None = None
    approval: ApprovalRequirement | None = None


class PendingTransactionPlan(BaseModel):
    """A plan awaiting the user's confirm or cancel."""

    plan_id: str
    wallet_address: str
    plan: TransactionPlan
    original_command: str | None = None
    language: str = "en"
    created_at: datetime


class TxResult(BaseModel):
    """Outcome of one submission attempt."""

    success: bool
    tx_hash: str | None = None
    explorer_url: str | None = None
    error: str | None = None


class QuoteRequest(BaseModel):
    """Request body for POST /api/swap/quote."""

    model_config = {"extra": "forbid"}

    from_token: str = Field(min_length=1, max_length=10)
    to_token: str = Field(min_length=1, max_length=10)
    amount: str = Field(min_length=1, max_length=40)
    wallet_address: str = Field(min_length=42, max_length=42)
    chain: str | None = None


class PreparePlanRequest(BaseModel):
    """Request body for POST /api/plans and POST /api/execute-transaction."""

    model_config = {"extra": "forbid"}

    wallet_address: str = Field(min_length=42, max_length=42)
    kind: Literal["send", "swap", "bridge"]
    amount: str = Field(min_length=1, max_length=40)
    token: str = Field(min_length=1, max_length=10)
    recipient: str | None = None
    to_token: str | None = None
    chain: str | None = None
    to_chain: str | None = None
    original_command: str | None = Field(default=None, max_length=1000)
    language: str = "en"


class PrepareOutcome(BaseModel):
    """Result of preparing an intent: either a parked plan or a created claim."""

    kind: Literal["plan", "claim"]
    pending: PendingTransactionPlan | None = None
    claim_token: str | None = None
    claim_url: str | None = None
    sms_sent: bool = False
    message: str


class ConfirmOutcome(BaseModel):
    """Result of confirming a parked plan."""

    result: TxResult | None = None
    transaction_id: UUID | None = None
