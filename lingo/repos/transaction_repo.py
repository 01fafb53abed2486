"""Repository for transaction history operations."""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import UUID, uuid4

import asyncpg

from lingo.db import get_conn
from lingo.models.transaction import NewTransaction, TransactionRecord, TransactionStats

_DEFAULT_PAGE_SIZE = 50


def _row_to_record(row: asyncpg.Record) -> TransactionRecord:
    """Convert a database row to a TransactionRecord model."""
    return TransactionRecord(
        id=row["id"],
        wallet_address=row["wallet_address"],
        type=row["type"],
        status=row["status"],
        tx_hash=row["tx_hash"],
        token_in=row["token_in"],
        token_out=row["token_out"],
        amount_in=row["amount_in"],
        amount_out=row["amount_out"],
        counterparty_address=row["counterparty_address"],
        counterparty_phone=row["counterparty_phone"],
        chain=row["chain"],
        description=row["description"],
        language=row["language"],
        original_command=row["original_command"],
        error_message=row["error_message"],
        created_at=row["created_at"],
        confirmed_at=row["confirmed_at"],
    )


class TransactionRepo:
    """
    All transaction_history database operations.

    Append-only: rows are inserted pending and only ever move
    pending → confirmed or pending → failed. Wallet addresses are stored
    lower-cased so lookups are case-insensitive.
    """

    async def create(self, tx: NewTransaction) -> TransactionRecord:
        """Insert a new pending record."""
        async with get_conn() as conn:
            row = await conn.fetchrow(
                """
                INSERT INTO transaction_history (
                    id, wallet_address, type, status, token_in, token_out,
                    amount_in, amount_out, counterparty_address, counterparty_phone,
                    chain, description, language, original_command, created_at
                )
                VALUES ($1, $2, $3, 'pending', $4, $5, $6, $7, $8, $9, $10, $11, $12, $13, $14)
                RETURNING *
                """,
                uuid4(),
                tx.wallet_address.lower(),
                tx.type,
                tx.token_in,
                tx.token_out,
                tx.amount_in,
                tx.amount_out,
                tx.counterparty_address,
                tx.counterparty_phone,
                tx.chain,
                tx.description,
                tx.language,
                tx.original_command,
                datetime.now(UTC),
            )
            return _row_to_record(row)

    async def attach_hash(self, tx_id: UUID, tx_hash: str) -> TransactionRecord | None:
        """
        Store the broadcast hash on a pending record.

        Returns:
            Updated record, or None if the record is missing or no longer pending
        """
        async with get_conn() as conn:
            row = await conn.fetchrow(
                """
                UPDATE transaction_history
                SET tx_hash = $2
                WHERE id = $1 AND status = 'pending'
                RETURNING *
                """,
                tx_id,
                tx_hash,
            )
            return _row_to_record(row) if row else None

    async def update_status(
        self,
        tx_id: UUID,
        status: str,
        tx_hash: str | None = None,
        error_message: str | None = None,
    ) -> TransactionRecord | None:
        """
        Move a pending record to confirmed or failed.

        The WHERE clause carries the state machine: a record that already
        left pending is not touched.

        Returns:
            Updated record, or None if the record is missing or no longer pending
        """
        now = datetime.now(UTC)
        async with get_conn() as conn:
            row = await conn.fetchrow(
                """
                UPDATE transaction_history
                SET status = $2,
                    tx_hash = COALESCE($3, tx_hash),
                    error_message = $4,
                    confirmed_at = CASE WHEN $2 = 'confirmed' THEN $5 ELSE confirmed_at END
                WHERE id = $1 AND status = 'pending'
                RETURNING *
                """,
                tx_id,
                status,
                tx_hash,
                error_message,
                now,
            )
            return _row_to_record(row) if row else None

    async def get(self, tx_id: UUID) -> TransactionRecord | None:
        async with get_conn() as conn:
            row = await conn.fetchrow("SELECT * FROM transaction_history WHERE id = $1", tx_id)
            return _row_to_record(row) if row else None

    async def get_by_hash(self, tx_hash: str) -> TransactionRecord | None:
        async with get_conn() as conn:
            row = await conn.fetchrow("SELECT * FROM transaction_history WHERE tx_hash = $1", tx_hash)
            return _row_to_record(row) if row else None

    async def list_for_wallet(
        self,
        wallet_address: str,
        type: str | None = None,
        status: str | None = None,
        chain: str | None = None,
        limit: int = _DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> list[TransactionRecord]:
        """
        List a wallet's records, newest first, with optional filters.

        Args:
            wallet_address: Wallet (any case)
            type: Only this transaction type
            status: Only this status
            chain: Only this chain
            limit: Page size
            offset: Rows to skip

        Returns:
            List of TransactionRecord
        """
        clauses = ["wallet_address = $1"]
        params: list = [wallet_address.lower()]
        for column, value in (("type", type), ("status", status), ("chain", chain)):
            if value is not None:
                params.append(value)
                clauses.append(f"{column} = ${len(params)}")
        params.extend([limit, offset])
        where = " AND ".join(clauses)

        async with get_conn() as conn:
            rows = await conn.fetch(
                f"""
                SELECT * FROM transaction_history
                WHERE {where}
                ORDER BY created_at DESC
                LIMIT ${len(params) - 1} OFFSET ${len(params)}
                """,
                *params,
            )
            return [_row_to_record(row) for row in rows]

    async def stats(self, wallet_address: str) -> TransactionStats:
        """Confirmed sends, receives and swaps, plus anything still pending."""
        async with get_conn() as conn:
            row = await conn.fetchrow(
                """
                SELECT
                    COUNT(*) FILTER (WHERE type = 'send' AND status = 'confirmed') AS total_sent,
                    COUNT(*) FILTER (WHERE type = 'receive' AND status = 'confirmed') AS total_received,
                    COUNT(*) FILTER (WHERE type = 'swap' AND status = 'confirmed') AS total_swaps,
                    COUNT(*) FILTER (WHERE status = 'pending') AS pending_count
                FROM transaction_history
                WHERE wallet_address = $1
                """,
                wallet_address.lower(),
            )
            return TransactionStats(
                total_sent=row["total_sent"],
                total_received=row["total_received"],
                total_swaps=row["total_swaps"],
                pending_count=row["pending_count"],
            )
