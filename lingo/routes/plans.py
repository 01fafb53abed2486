"""
Plan routes: prepare, confirm, cancel, and one-shot execute.

Browser wallets sign themselves: they prepare a plan here, send plan.tx
through the embedded wallet, and record the result (with plan_id, which
releases the parked plan) via /api/transactions/record.
Confirm and execute-transaction sign with the server-held session.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from lingo.deps import get_pipeline, get_signer
from lingo.models.intent import Intent
from lingo.models.plan import ConfirmOutcome, PreparePlanRequest, PrepareOutcome
from lingo.services.chain_registry import get_chain
from lingo.services.pipeline import CommandPipeline
from lingo.services.wallet_session import WalletSession, add_chain_params

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["plans"])


def _intent_from_request(req: PreparePlanRequest) -> Intent:
    if req.kind == "send":
        return Intent(
            kind="send",
            amount=req.amount,
            token=req.token.upper(),
            from_chain=req.chain,
            recipient_raw=req.recipient,
            confidence=1.0,
        )
    to_token = req.to_token or (req.token if req.kind == "bridge" else None)
    return Intent(
        kind=req.kind,
        amount=req.amount,
        token=req.token.upper(),
        from_token=req.token.upper(),
        to_token=to_token.upper() if to_token else None,
        from_chain=req.chain,
        to_chain=req.to_chain,
        recipient_raw=req.recipient,
        confidence=1.0,
    )


def _prepare_response(outcome: PrepareOutcome) -> dict:
    body = {"success": True, **outcome.model_dump(mode="json")}
    if outcome.pending is not None:
        body["add_chain_params"] = add_chain_params(get_chain(outcome.pending.plan.chain))
    return body


def _confirm_response(outcome: ConfirmOutcome) -> dict | JSONResponse:
    result = outcome.result
    body = {
        "success": bool(result and result.success),
        "tx_hash": result.tx_hash if result else None,
        "explorer_url": result.explorer_url if result else None,
        "error": result.error if result else None,
        "transaction_id": str(outcome.transaction_id) if outcome.transaction_id else None,
    }
    if not body["success"]:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body)
    return body


@router.post("/plans", status_code=201)
async def prepare_plan(req: PreparePlanRequest, pipeline: CommandPipeline = Depends(get_pipeline)) -> dict:
    """
    Resolve and plan a send, swap or bridge and park it for confirmation.

    Sending to an unlinked phone creates a claim instead (kind "claim").
    """
    outcome = await pipeline.prepare(
        _intent_from_request(req),
        req.wallet_address,
        original_command=req.original_command,
        language=req.language,
    )
    return _prepare_response(outcome)


@router.post("/plans/{plan_id}/confirm", status_code=200, response_model=None)
async def confirm_plan(
    plan_id: str,
    pipeline: CommandPipeline = Depends(get_pipeline),
    signer: WalletSession = Depends(get_signer),
) -> dict | JSONResponse:
    """Sign and broadcast a parked plan with the server signer."""
    outcome = await pipeline.confirm(plan_id, signer)
    return _confirm_response(outcome)


@router.delete("/plans/{plan_id}", status_code=200)
async def cancel_plan(plan_id: str, pipeline: CommandPipeline = Depends(get_pipeline)) -> dict:
    """Discard a parked plan. Nothing was broadcast."""
    if not pipeline.cancel(plan_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Plan not found.")
    return {"success": True}


@router.post("/execute-transaction", status_code=200, response_model=None)
async def execute_transaction(
    req: PreparePlanRequest,
    pipeline: CommandPipeline = Depends(get_pipeline),
    signer: WalletSession = Depends(get_signer),
) -> dict | JSONResponse:
    """Prepare and immediately confirm with the server signer."""
    if req.wallet_address.lower() != signer.address.lower():
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="wallet_address does not match the server signer.",
        )

    outcome = await pipeline.prepare(
        _intent_from_request(req),
        signer.address,
        original_command=req.original_command,
        language=req.language,
    )
    if outcome.pending is None:
        return _prepare_response(outcome)

    logger.info("Executing plan %s immediately", outcome.pending.plan_id)
    return _confirm_response(await pipeline.confirm(outcome.pending.plan_id, signer))
