"""Natural-language command routes: parse and translate."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, status

from lingo.config import settings
from lingo.deps import client_ip, get_pipeline, get_translator
from lingo.middleware.rate_limit import rate_limiter
from lingo.models.intent import ParseCommandRequest, ParseCommandResponse, TranslateRequest
from lingo.services.pipeline import CommandPipeline
from lingo.services.translator import Translator

router = APIRouter(prefix="/api", tags=["commands"])


@router.post("/parse-command", status_code=200)
async def parse_command(
    req: ParseCommandRequest,
    request: Request,
    pipeline: CommandPipeline = Depends(get_pipeline),
) -> ParseCommandResponse:
    """
    Turn a chat message into an intent plus a reply.

    Never fails on ambiguous input; unrecognised text comes back as a chat
    intent with a fallback reply. Rate limited per wallet (or IP when the
    caller has no wallet yet).
    """
    key = f"wallet:{req.wallet_address.lower()}" if req.wallet_address else f"ip:{client_ip(request)}"
    if not rate_limiter.check_rate_limit(key, max_requests=settings.COMMANDS_PER_MINUTE, window_minutes=1):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=f"Too many commands. Maximum {settings.COMMANDS_PER_MINUTE} per minute.",
            headers={"Retry-After": "60"},
        )

    result = await pipeline.interpret(req.command, req.language)
    return ParseCommandResponse(
        success=True,
        intent=result.intent,
        response=result.response,
        translated_command=result.translated_command,
    )


@router.post("/translate", status_code=200)
async def translate(req: TranslateRequest, translator: Translator = Depends(get_translator)) -> dict:
    """Translation pass-through. Returns the input unchanged when translation is unavailable."""
    translated = await translator.translate(req.text, req.target_language)
    return {"success": True, "translated_text": translated, "translated": translated != req.text}
