"""Swap quote route."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from lingo.deps import get_planner
from lingo.models.plan import QuoteRequest
from lingo.services.planner import TransactionPlanner

router = APIRouter(prefix="/api/swap", tags=["swaps"])


@router.post("/quote", status_code=200)
async def swap_quote(req: QuoteRequest, planner: TransactionPlanner = Depends(get_planner)) -> dict:
    """Quote a swap without planning or parking anything. Router errors surface verbatim."""
    quote = await planner.quote(req.from_token, req.to_token, req.amount, req.wallet_address, chain=req.chain)
    return {"success": True, "quote": quote.model_dump(mode="json")}
