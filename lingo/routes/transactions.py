"""Transaction history routes."""

from __future__ import annotations

from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status

from lingo.deps import get_history, get_pipeline, get_reconciler
from lingo.models.transaction import RecordTransactionRequest
from lingo.services.executor import StatusReconciler
from lingo.services.history import TransactionHistory
from lingo.services.pipeline import CommandPipeline

router = APIRouter(prefix="/api/transactions", tags=["transactions"])


@router.post("/record", status_code=200)
async def record_transaction(
    req: RecordTransactionRequest,
    history: TransactionHistory = Depends(get_history),
    pipeline: CommandPipeline = Depends(get_pipeline),
) -> dict:
    """
    Record a transaction signed in the browser wallet.

    - create: add a pending record and release plan_id, the parked plan
      the browser wallet just signed
    - update_status: attach a hash (status "pending"), or move a pending
      record to confirmed or failed
    """
    if req.action == "create":
        if req.transaction is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="transaction is required.")
        record = await history.record(req.transaction)
        if req.plan_id:
            pipeline.release(req.plan_id, req.transaction.wallet_address)
        return {"success": True, "transaction": record.model_dump(mode="json")}

    if req.transaction_id is None or req.status is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="transaction_id and status are required.",
        )

    if req.status == "pending":
        if not req.tx_hash:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="tx_hash is required.")
        record = await history.attach_hash(req.transaction_id, req.tx_hash)
    else:
        record = await history.update_status(
            req.transaction_id, req.status, tx_hash=req.tx_hash, error=req.error_message
        )
    return {"success": True, "transaction": record.model_dump(mode="json")}


@router.get("", status_code=200)
async def list_transactions(
    wallet_address: str = Query(min_length=42, max_length=42),
    type: Literal["send", "receive", "swap", "bridge", "claim"] | None = None,
    status: Literal["pending", "confirmed", "failed"] | None = None,
    chain: str | None = None,
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    include_stats: bool = False,
    history: TransactionHistory = Depends(get_history),
) -> dict:
    """List a wallet's transactions, newest first."""
    records = await history.list(
        wallet_address, type=type, status=status, chain=chain, limit=limit + 1, offset=offset
    )
    body = {
        "success": True,
        "transactions": [r.model_dump(mode="json") for r in records[:limit]],
        "has_more": len(records) > limit,
    }
    if include_stats:
        body["stats"] = (await history.stats(wallet_address)).model_dump()
    return body


@router.post("/{transaction_id}/reconcile", status_code=200)
async def reconcile_transaction(
    transaction_id: UUID,
    reconciler: StatusReconciler = Depends(get_reconciler),
) -> dict:
    """Check the chain and move a pending record to confirmed or failed if it has settled."""
    record = await reconciler.reconcile(transaction_id)
    return {"success": True, "transaction": record.model_dump(mode="json")}
