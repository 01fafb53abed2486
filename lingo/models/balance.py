"""Balance request model."""

from __future__ import annotations

from pydantic import BaseModel, Field


class BalanceRequest(BaseModel):
    """Request body for POST /api/get-balance."""

    model_config = {"extra": "forbid"}

    wallet_address: str = Field(min_length=42, max_length=42)
    chain: str | None = None
