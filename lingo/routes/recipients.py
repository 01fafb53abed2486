"""Recipient routes: resolve, send to phone, link phone."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from lingo.deps import get_claims, get_pipeline, get_resolver
from lingo.models.claim import ClaimPublic
from lingo.models.recipient import LinkPhoneRequest, NeedsClaim, ResolveRecipientRequest, SendToPhoneRequest
from lingo.services.claim_manager import ClaimManager
from lingo.services.pipeline import CommandPipeline
from lingo.services.recipient_resolver import RecipientResolver

router = APIRouter(prefix="/api", tags=["recipients"])


@router.post("/resolve-recipient", status_code=200)
async def resolve_recipient(
    req: ResolveRecipientRequest,
    resolver: RecipientResolver = Depends(get_resolver),
) -> dict:
    """Resolve an address or phone. An unlinked phone is a normal answer, not an error."""
    target = await resolver.resolve(req.recipient)
    if isinstance(target, NeedsClaim):
        return {"success": True, "has_wallet": False, "needs_claim": True, "address": None, "via_phone": True}
    return {
        "success": True,
        "has_wallet": True,
        "needs_claim": False,
        "address": target.address,
        "via_phone": target.via_phone,
    }


@router.post("/send-to-phone", status_code=200)
async def send_to_phone(
    req: SendToPhoneRequest,
    resolver: RecipientResolver = Depends(get_resolver),
    pipeline: CommandPipeline = Depends(get_pipeline),
) -> dict:
    """
    Send to a phone number.

    Linked phones come back with the wallet to send to directly. Unlinked
    phones get a claim and a best-effort SMS with the claim link.
    """
    phone = req.phone.strip()
    if not phone.startswith("+"):
        phone = f"+{phone}"

    target = await resolver.resolve(phone)
    if not isinstance(target, NeedsClaim):
        return {"success": True, "has_wallet": True, "recipient_address": target.address}

    outcome = await pipeline.claim_for_phone(target, req.amount, req.token, req.sender_address)
    return {
        "success": True,
        "has_wallet": False,
        "claim_token": outcome.claim_token,
        "claim_url": outcome.claim_url,
        "sms_sent": outcome.sms_sent,
        "message": outcome.message,
    }


@router.post("/link-phone", status_code=200)
async def link_phone(
    req: LinkPhoneRequest,
    resolver: RecipientResolver = Depends(get_resolver),
    claims: ClaimManager = Depends(get_claims),
) -> dict:
    """Link a phone to a wallet and list claims already waiting for that phone."""
    link = await resolver.link_phone(req.phone, req.wallet_address)
    waiting = await claims.pending_for_phone(req.phone)
    return {
        "success": True,
        "wallet_address": link.wallet_address,
        "pending_claims": [ClaimPublic.from_model(c).model_dump(mode="json") for c in waiting],
    }
