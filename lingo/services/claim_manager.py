"""
Claim manager: deferred, phone-addressed grants of funds.

A claim is created when a send resolves to a phone with no linked wallet.
The claim token is a bearer capability delivered over SMS; whoever holds it
can redeem once, before expiry.

Known gap: redeeming only marks the claim and records a pending "claim"
history row (CommandPipeline.record_claim_redemption). The server holds no
funds for claims, so the transfer from the sender happens outside this
service and a claim can stay marked with that row still pending.
"""

from __future__ import annotations

import logging
import secrets
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Protocol

from lingo.config import settings
from lingo.errors import AlreadyClaimed, ClaimNotFound, InvalidAmount, InvalidRecipient, UnsupportedToken
from lingo.models.claim import PendingClaim
from lingo.services.chain_registry import SUPPORTED_TOKENS
from lingo.services.command_parser import is_address
from lingo.utils.phone_hash import hash_phone, mask_phone, normalize_phone

logger = logging.getLogger(__name__)

_CLAIM_TOKEN_BYTES = 32


class ClaimStore(Protocol):
    async def insert(
        self,
        phone_hash: str,
        amount: str,
        token: str,
        sender_address: str,
        claim_token: str,
        expires_at: datetime,
        now: datetime,
    ) -> PendingClaim: ...

    async def get_active(self, claim_token: str, now: datetime) -> PendingClaim | None: ...

    async def get_by_token(self, claim_token: str) -> PendingClaim | None: ...

    async def mark_claimed(self, claim_token: str, wallet_address: str, now: datetime) -> PendingClaim | None: ...

    async def list_active_for_phone(self, phone_hash: str, now: datetime) -> list[PendingClaim]: ...


def _utcnow() -> datetime:
    return datetime.now(UTC)


def generate_claim_token() -> str:
    """URL-safe token with 256 bits of entropy."""
    return secrets.token_urlsafe(_CLAIM_TOKEN_BYTES)


class ClaimManager:
    """Create, look up and redeem pending claims."""

    def __init__(
        self,
        store: ClaimStore,
        clock: Callable[[], datetime] = _utcnow,
        expiry_days: int | None = None,
    ) -> None:
        self._store = store
        self._clock = clock
        self._expiry = timedelta(days=expiry_days if expiry_days is not None else settings.CLAIM_EXPIRY_DAYS)

    async def create_claim(self, phone: str, amount: str, token: str, sender_address: str) -> str:
        """
        Persist a new unclaimed grant and return its claim token.

        Args:
            phone: Recipient phone in any formatting
            amount: Decimal amount string as the user typed it
            token: Token symbol
            sender_address: Wallet that funds the claim

        Returns:
            The claim token

        Raises:
            InvalidRecipient: bad phone or sender address
            InvalidAmount: non-numeric or non-positive amount
            UnsupportedToken: symbol outside the allowlist
        """
        digits = normalize_phone(phone)
        if len(digits) < 7:
            raise InvalidRecipient("Invalid phone number")
        if not is_address(sender_address):
            raise InvalidRecipient("Invalid sender address")
        symbol = token.strip().upper()
        if symbol not in SUPPORTED_TOKENS:
            raise UnsupportedToken(f"Token '{token}' is not supported")
        try:
            value = Decimal(amount)
        except InvalidOperation as exc:
            raise InvalidAmount(f"'{amount}' is not a valid amount") from exc
        if not value.is_finite() or value <= 0:
            raise InvalidAmount("Amount must be greater than zero")

        now = self._clock()
        claim_token = generate_claim_token()
        await self._store.insert(
            phone_hash=hash_phone(digits),
            amount=amount,
            token=symbol,
            sender_address=sender_address,
            claim_token=claim_token,
            expires_at=now + self._expiry,
            now=now,
        )
        logger.info("Created claim for %s: %s %s", mask_phone(digits), amount, symbol)
        return claim_token

    async def get_claim(self, claim_token: str) -> PendingClaim:
        """
        Return an active claim.

        Raises:
            ClaimNotFound: unknown, expired or already claimed (not distinguished)
        """
        claim = await self._store.get_active(claim_token, self._clock())
        if claim is None:
            raise ClaimNotFound()
        return claim

    async def redeem_claim(self, claim_token: str, wallet_address: str) -> PendingClaim:
        """
        Mark a claim as redeemed by wallet_address.

        The store flips claimed with one conditional update, so of two
        concurrent redemptions exactly one gets the row back.

        Raises:
            InvalidRecipient: wallet_address is not an address
            AlreadyClaimed: someone redeemed it first
            ClaimNotFound: unknown or expired
        """
        if not is_address(wallet_address):
            raise InvalidRecipient("Invalid wallet address")

        claimed = await self._store.mark_claimed(claim_token, wallet_address, self._clock())
        if claimed is not None:
            logger.info("Claim %s… redeemed by %s", claim_token[:6], wallet_address)
            return claimed

        existing = await self._store.get_by_token(claim_token)
        if existing is not None and existing.claimed:
            raise AlreadyClaimed()
        raise ClaimNotFound()

    async def pending_for_phone(self, phone: str) -> list[PendingClaim]:
        """Active claims waiting for a phone (shown once its owner links a wallet)."""
        return await self._store.list_active_for_phone(hash_phone(phone), self._clock())
