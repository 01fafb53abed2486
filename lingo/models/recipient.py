"""Recipient resolution and phone-link models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class ResolvedRecipient(BaseModel):
    """A recipient with a concrete destination address."""

    address: str
    via_phone: bool = False
    phone: str | None = None


class NeedsClaim(BaseModel):
    """Phone recipient with no linked wallet; funds go through a claim."""

    phone: str
    phone_hash: str


class PhoneWalletLink(BaseModel):
    """Core phone link model. Maps 1:1 to phone_wallets table."""

    phone_hash: str
    wallet_address: str
    created_at: datetime
    updated_at: datetime


class LinkPhoneRequest(BaseModel):
    """Request body for POST /api/link-phone."""

    model_config = {"extra": "forbid"}

    phone: str = Field(min_length=1, max_length=32)
    wallet_address: str = Field(min_length=42, max_length=42)


class ResolveRecipientRequest(BaseModel):
    """Request body for POST /api/resolve-recipient."""

    model_config = {"extra": "forbid"}

    recipient: str = Field(min_length=1, max_length=64)


class SendToPhoneRequest(BaseModel):
    """Request body for POST /api/send-to-phone."""

    model_config = {"extra": "forbid"}

    phone: str = Field(min_length=1, max_length=32)
    amount: str = Field(min_length=1, max_length=40)
    token: str = Field(min_length=1, max_length=10)
    sender_address: str = Field(min_length=42, max_length=42)
