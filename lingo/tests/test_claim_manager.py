"""Tests for claim creation, lookup, expiry and redemption."""

from __future__ import annotations

import asyncio
from datetime import timedelta

import pytest
from conftest import RECIPIENT, SENDER, T0

from lingo.errors import AlreadyClaimed, ClaimNotFound, InvalidAmount, InvalidRecipient, UnsupportedToken
from lingo.services.claim_manager import generate_claim_token
from lingo.utils.phone_hash import hash_phone

pytestmark = pytest.mark.asyncio(loop_scope="session")

PHONE = "+15551234567"


async def test_create_claim_stores_hashed_phone(claims, claim_store, clock):
    token = await claims.create_claim("+1 (555) 123-4567", "10", "usdc", SENDER)

    stored = claim_store.claims[token]
    assert stored.phone_hash == hash_phone(PHONE)
    assert stored.token == "USDC"
    assert stored.amount == "10"
    assert stored.claimed is False
    assert stored.created_at == T0
    assert stored.expires_at == T0 + timedelta(days=7)


async def test_claim_tokens_are_unguessable():
    tokens = {generate_claim_token() for _ in range(50)}
    assert len(tokens) == 50
    assert all(len(t) >= 40 for t in tokens)


async def test_get_claim_before_and_after_expiry(claims, clock):
    token = await claims.create_claim(PHONE, "10", "USDC", SENDER)

    clock.advance(days=6)
    claim = await claims.get_claim(token)
    assert claim.amount == "10"

    clock.advance(days=2)
    with pytest.raises(ClaimNotFound):
        await claims.get_claim(token)


async def test_unknown_claim(claims):
    with pytest.raises(ClaimNotFound):
        await claims.get_claim("nope")


async def test_redeem_once(claims):
    token = await claims.create_claim(PHONE, "10", "USDC", SENDER)

    redeemed = await claims.redeem_claim(token, RECIPIENT)
    assert redeemed.claimed is True
    assert redeemed.claimed_by == RECIPIENT

    with pytest.raises(AlreadyClaimed):
        await claims.redeem_claim(token, RECIPIENT)
    with pytest.raises(ClaimNotFound):
        await claims.get_claim(token)


async def test_concurrent_redemptions_exactly_one_wins(claims):
    token = await claims.create_claim(PHONE, "10", "USDC", SENDER)

    results = await asyncio.gather(
        claims.redeem_claim(token, RECIPIENT),
        claims.redeem_claim(token, SENDER),
        return_exceptions=True,
    )
    assert sum(1 for r in results if isinstance(r, AlreadyClaimed)) == 1
    assert sum(1 for r in results if not isinstance(r, Exception)) == 1


async def test_redeem_expired(claims, clock):
    token = await claims.create_claim(PHONE, "10", "USDC", SENDER)
    clock.advance(days=8)
    with pytest.raises(ClaimNotFound):
        await claims.redeem_claim(token, RECIPIENT)


async def test_redeem_rejects_bad_wallet(claims):
    token = await claims.create_claim(PHONE, "10", "USDC", SENDER)
    with pytest.raises(InvalidRecipient):
        await claims.redeem_claim(token, "not-a-wallet")


@pytest.mark.parametrize(
    ("phone", "amount", "token", "sender", "error"),
    [
        ("+123", "10", "USDC", SENDER, InvalidRecipient),
        (PHONE, "10", "USDC", "0xnope", InvalidRecipient),
        (PHONE, "10", "DOGE", SENDER, UnsupportedToken),
        (PHONE, "ten", "USDC", SENDER, InvalidAmount),
        (PHONE, "0", "USDC", SENDER, InvalidAmount),
        (PHONE, "-5", "USDC", SENDER, InvalidAmount),
        (PHONE, "NaN", "USDC", SENDER, InvalidAmount),
    ],
)
async def test_create_claim_validation(claims, claim_store, phone, amount, token, sender, error):
    with pytest.raises(error):
        await claims.create_claim(phone, amount, token, sender)
    assert claim_store.claims == {}


async def test_pending_for_phone(claims):
    await claims.create_claim(PHONE, "10", "USDC", SENDER)
    await claims.create_claim("+15551234567", "0.01", "ETH", SENDER)
    await claims.create_claim("+15559999999", "1", "DAI", SENDER)

    waiting = await claims.pending_for_phone("+1 555 123 4567")
    assert sorted(c.token for c in waiting) == ["ETH", "USDC"]
