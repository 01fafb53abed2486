"""Transaction history service: the pending → confirmed/failed state machine."""

from __future__ import annotations

import logging
from typing import Protocol
from uuid import UUID

from lingo.errors import InvalidStatusTransition, RecordNotFound
from lingo.models.transaction import NewTransaction, TransactionRecord, TransactionStats, TransactionStatus

logger = logging.getLogger(__name__)

_TERMINAL_STATUSES = ("confirmed", "failed")


class HistoryStore(Protocol):
    async def create(self, tx: NewTransaction) -> TransactionRecord: ...

    async def attach_hash(self, tx_id: UUID, tx_hash: str) -> TransactionRecord | None: ...

    async def update_status(
        self,
        tx_id: UUID,
        status: str,
        tx_hash: str | None = None,
        error_message: str | None = None,
    ) -> TransactionRecord | None: ...

    async def get(self, tx_id: UUID) -> TransactionRecord | None: ...

    async def get_by_hash(self, tx_hash: str) -> TransactionRecord | None: ...

    async def list_for_wallet(
        self,
        wallet_address: str,
        type: str | None = None,
        status: str | None = None,
        chain: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[TransactionRecord]: ...

    async def stats(self, wallet_address: str) -> TransactionStats: ...


class TransactionHistory:
    """
    Records outcomes of planned transactions.

    Records are created pending before broadcast and move exactly once, to
    confirmed or failed. The store enforces this with a conditional update;
    this class turns a refused update into InvalidStatusTransition.
    """

    def __init__(self, store: HistoryStore) -> None:
        self._store = store

    async def record(self, tx: NewTransaction) -> TransactionRecord:
        record = await self._store.create(tx)
        logger.info("Recorded pending %s %s for %s", record.type, record.id, record.wallet_address)
        return record

    async def attach_hash(self, tx_id: UUID, tx_hash: str) -> TransactionRecord:
        """Store the broadcast hash; the record stays pending until reconciled."""
        updated = await self._store.attach_hash(tx_id, tx_hash)
        if updated is None:
            await self._raise_for(tx_id)
        return updated

    async def update_status(
        self,
        tx_id: UUID,
        status: TransactionStatus,
        tx_hash: str | None = None,
        error: str | None = None,
    ) -> TransactionRecord:
        """
        Move a pending record to confirmed or failed.

        Raises:
            InvalidStatusTransition: target is not terminal, or the record already left pending
            RecordNotFound: no such record
        """
        if status not in _TERMINAL_STATUSES:
            raise InvalidStatusTransition(f"Cannot move a transaction to '{status}'")

        updated = await self._store.update_status(tx_id, status, tx_hash=tx_hash, error_message=error)
        if updated is None:
            await self._raise_for(tx_id)
        logger.info("Transaction %s → %s", tx_id, status)
        return updated

    async def get(self, tx_id: UUID) -> TransactionRecord:
        record = await self._store.get(tx_id)
        if record is None:
            raise RecordNotFound()
        return record

    async def get_by_hash(self, tx_hash: str) -> TransactionRecord:
        record = await self._store.get_by_hash(tx_hash)
        if record is None:
            raise RecordNotFound()
        return record

    async def list(
        self,
        wallet_address: str,
        type: str | None = None,
        status: str | None = None,
        chain: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[TransactionRecord]:
        return await self._store.list_for_wallet(
            wallet_address, type=type, status=status, chain=chain, limit=limit, offset=offset
        )

    async def stats(self, wallet_address: str) -> TransactionStats:
        return await self._store.stats(wallet_address)

    async def _raise_for(self, tx_id: UUID) -> None:
        existing = await self._store.get(tx_id)
        if existing is None:
            raise RecordNotFound()
        raise InvalidStatusTransition(f"Transaction is already {existing.status}")
