"""Claim-link routes: look up and redeem a pending claim."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, status

from lingo.config import settings
from lingo.deps import client_ip, get_claims, get_pipeline
from lingo.middleware.rate_limit import rate_limiter
from lingo.models.claim import ClaimPublic, GetClaimRequest, RedeemClaimRequest
from lingo.services.claim_manager import ClaimManager
from lingo.services.pipeline import CommandPipeline

router = APIRouter(prefix="/api", tags=["claims"])


def _check_claim_rate_limit(request: Request) -> None:
    if not rate_limiter.check_rate_limit(
        f"claim:{client_ip(request)}",
        max_requests=settings.CLAIM_LOOKUPS_PER_HOUR,
        window_minutes=60,
    ):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=f"Too many claim requests. Maximum {settings.CLAIM_LOOKUPS_PER_HOUR} per hour.",
            headers={"Retry-After": "3600"},
        )


@router.post("/get-claim", status_code=200)
async def get_claim(
    req: GetClaimRequest,
    request: Request,
    claims: ClaimManager = Depends(get_claims),
) -> dict:
    """Show an active claim. Unknown, expired and redeemed claims all look the same (404)."""
    _check_claim_rate_limit(request)
    claim = await claims.get_claim(req.claim_token)
    return {"success": True, "claim": ClaimPublic.from_model(claim).model_dump(mode="json")}


@router.post("/claim-crypto", status_code=200)
async def claim_crypto(
    req: RedeemClaimRequest,
    request: Request,
    claims: ClaimManager = Depends(get_claims),
    pipeline: CommandPipeline = Depends(get_pipeline),
) -> dict:
    """
    Redeem a claim to the caller's wallet.

    The claim is marked first; a second redemption gets 409. Nothing is sent
    from the server: the transfer from the sender stays pending in history.
    """
    _check_claim_rate_limit(request)
    claim = await claims.redeem_claim(req.claim_token, req.wallet_address)
    record = await pipeline.record_claim_redemption(claim, req.wallet_address)

    return {
        "success": True,
        "amount": claim.amount,
        "token": claim.token,
        "sender_address": claim.sender_address,
        "payout_status": record.status,
        "transaction_id": str(record.id),
    }
