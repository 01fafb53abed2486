"""Repository for phone → wallet links."""

from __future__ import annotations

from datetime import UTC, datetime

import asyncpg

from lingo.db import get_conn
from lingo.models.recipient import PhoneWalletLink


def _row_to_link(row: asyncpg.Record) -> PhoneWalletLink:
    """Convert a database row to a PhoneWalletLink model."""
    return PhoneWalletLink(
        phone_hash=row["phone_hash"],
        wallet_address=row["wallet_address"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class PhoneLinkRepo:
    """All phone_wallets database operations. Keys are phone hashes, never raw numbers."""

    async def upsert_link(self, phone_hash: str, wallet_address: str) -> PhoneWalletLink:
        """
        Create or overwrite the link for a phone hash.

        One statement, so two concurrent links for the same phone cannot
        leave duplicate rows; the later write wins.

        Args:
            phone_hash: SHA-256 of the digits-only phone
            wallet_address: Checksummed wallet address

        Returns:
            The stored link
        """
        now = datetime.now(UTC)
        async with get_conn() as conn:
            row = await conn.fetchrow(
                """
                INSERT INTO phone_wallets (phone_hash, wallet_address, created_at, updated_at)
                VALUES ($1, $2, $3, $3)
                ON CONFLICT (phone_hash) DO UPDATE
                SET wallet_address = EXCLUDED.wallet_address,
                    updated_at = EXCLUDED.updated_at
                RETURNING *
                """,
                phone_hash,
                wallet_address,
                now,
            )
            return _row_to_link(row)

    async def get_link(self, phone_hash: str) -> PhoneWalletLink | None:
        """
        Look up the wallet linked to a phone hash.

        Returns:
            PhoneWalletLink if linked, None otherwise
        """
        async with get_conn() as conn:
            row = await conn.fetchrow(
                "SELECT * FROM phone_wallets WHERE phone_hash = $1",
                phone_hash,
            )
            return _row_to_link(row) if row else None
