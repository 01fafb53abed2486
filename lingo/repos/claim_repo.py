"""Repository for pending claim operations."""

from __future__ import annotations

from datetime import datetime
from uuid import uuid4

import asyncpg

from lingo.db import get_conn
from lingo.models.claim import PendingClaim


def _row_to_claim(row: asyncpg.Record) -> PendingClaim:
    """Convert a database row to a PendingClaim model."""
    return PendingClaim(
        id=row["id"],
        phone_hash=row["phone_hash"],
        amount=row["amount"],
        token=row["token"],
        sender_address=row["sender_address"],
        claim_token=row["claim_token"],
        expires_at=row["expires_at"],
        claimed=row["claimed"],
        claimed_by=row["claimed_by"],
        claimed_at=row["claimed_at"],
        created_at=row["created_at"],
    )


class ClaimRepo:
    """
    All pending_claims database operations.

    Rows are never deleted. Expiry is a read-time filter, not a job.
    """

    async def insert(
        self,
        phone_hash: str,
        amount: str,
        token: str,
        sender_address: str,
        claim_token: str,
        expires_at: datetime,
        now: datetime,
    ) -> PendingClaim:
        """Store a new unclaimed grant."""
        async with get_conn() as conn:
            row = await conn.fetchrow(
                """
                INSERT INTO pending_claims (
                    id, phone_hash, amount, token, sender_address,
                    claim_token, expires_at, claimed, created_at
                )
                VALUES ($1, $2, $3, $4, $5, $6, $7, false, $8)
                RETURNING *
                """,
                uuid4(),
                phone_hash,
                amount,
                token,
                sender_address,
                claim_token,
                expires_at,
                now,
            )
            return _row_to_claim(row)

    async def get_active(self, claim_token: str, now: datetime) -> PendingClaim | None:
        """
        Look up an active (not expired, not claimed) claim.

        Returns:
            PendingClaim if found and active, None otherwise
        """
        async with get_conn() as conn:
            row = await conn.fetchrow(
                """
                SELECT * FROM pending_claims
                WHERE claim_token = $1
                  AND claimed = false
                  AND expires_at > $2
                """,
                claim_token,
                now,
            )
            return _row_to_claim(row) if row else None

    async def get_by_token(self, claim_token: str) -> PendingClaim | None:
        """Unfiltered lookup, used only to tell AlreadyClaimed from not-found after a failed redeem."""
        async with get_conn() as conn:
            row = await conn.fetchrow(
                "SELECT * FROM pending_claims WHERE claim_token = $1",
                claim_token,
            )
            return _row_to_claim(row) if row else None

    async def mark_claimed(self, claim_token: str, wallet_address: str, now: datetime) -> PendingClaim | None:
        """
        Flip claimed to true if the claim is still active.

        Returns:
            The updated claim, or None if it was already claimed, expired or unknown
        """
        async with get_conn() as conn:
            row = await conn.fetchrow(
                """
                UPDATE pending_claims
                SET claimed = true, claimed_by = $2, claimed_at = $3
                WHERE claim_token = $1
                  AND claimed = false
                  AND expires_at > $3
                RETURNING *
                """,
                claim_token,
                wallet_address,
                now,
            )
            return _row_to_claim(row) if row else None

    async def list_active_for_phone(self, phone_hash: str, now: datetime) -> list[PendingClaim]:
        """Active claims for a phone hash, newest first."""
        async with get_conn() as conn:
            rows = await conn.fetch(
                """
                SELECT * FROM pending_claims
                WHERE phone_hash = $1
                  AND claimed = false
                  AND expires_at > $2
                ORDER BY created_at DESC
                """,
                phone_hash,
                now,
            )
            return [_row_to_claim(row) for row in rows]
