"""
asyncpg pool for the link, claim and history tables.

Repos get connections from get_conn() only.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from uuid import UUID

import asyncpg

from lingo.config import settings

pool: asyncpg.Pool | None = None


async def init_pool() -> None:
    """Create the pool. Runs once in the app lifespan."""
    global pool
    pool = await asyncpg.create_pool(
        dsn=settings.DATABASE_URL,
        min_size=settings.DB_POOL_MIN_SIZE,
        max_size=settings.DB_POOL_MAX_SIZE,
        command_timeout=30,
        init=_register_uuid_codec,
    )


async def close_pool() -> None:
    global pool
    if pool is not None:
        await pool.close()
        pool = None


async def _register_uuid_codec(conn: asyncpg.Connection) -> None:
    # Claim and transaction ids come back as uuid.UUID, matching the models.
    await conn.set_type_codec("uuid", encoder=str, decoder=UUID, schema="pg_catalog")


@asynccontextmanager
async def get_conn():
    """
    Acquire a connection wrapped in a transaction.

    Each repo call is one statement (or one short read-then-write) inside
    this block. Atomicity of upserts and claim redemption comes from the
    statement itself, not from locks held here.

    Usage:
        async with get_conn() as conn:
            row = await conn.fetchrow("SELECT * FROM pending_claims WHERE claim_token = $1", token)

    Yields:
        asyncpg.Connection inside an open transaction
    """
    if pool is None:
        raise RuntimeError("Database pool not initialized. Call init_pool() first.")

    async with pool.acquire() as conn:
        async with conn.transaction():
            yield conn
