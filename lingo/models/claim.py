"""Pending claim models for the phone-addressed claim-link flow."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class PendingClaim(BaseModel):
    """Core pending claim model. Maps 1:1 to pending_claims table."""

    id: UUID
    phone_hash: str
    amount: str
    token: str
    sender_address: str
    claim_token: str
    expires_at: datetime
    claimed: bool
    claimed_by: str | None = None
    claimed_at: datetime | None = None
    created_at: datetime


class ClaimPublic(BaseModel):
    """What the claim page gets to see. No phone hash, no token echo."""

    amount: str
    token: str
    sender_address: str
    expires_at: datetime

    @classmethod
    def from_model(cls, claim: PendingClaim) -> ClaimPublic:
        """Convert internal PendingClaim model to public API response."""
        return cls(
            amount=claim.amount,
            token=claim.token,
            sender_address=claim.sender_address,
            expires_at=claim.expires_at,
        )


class GetClaimRequest(BaseModel):
    """Request body for POST /api/get-claim."""

    model_config = {"extra": "forbid"}

    claim_token: str = Field(min_length=1, max_length=128)


class RedeemClaimRequest(BaseModel):
    """Request body for POST /api/claim-crypto."""

    model_config = {"extra": "forbid"}

    claim_token: str = Field(min_length=1, max_length=128)
    wallet_address: str = Field(min_length=42, max_length=42)
