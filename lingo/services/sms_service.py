"""Claim-link SMS over Twilio."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from twilio.rest import Client

from lingo.config import settings
from lingo.utils.phone_hash import mask_phone

logger = logging.getLogger(__name__)


@dataclass
class SmsResult:
    success: bool
    message_sid: str | None = None
    error: str | None = None


def claim_sms_body(amount: str, token: str, claim_url: str) -> str:
    return f"🎉 You received {amount} {token}!\n\nClaim it here:\n{claim_url}\n\nDownload Lingo Wallet to get started!"


def build_twilio_client() -> Client | None:
    """Twilio REST client from settings, or None when SMS is not configured."""
    if not settings.TWILIO_ACCOUNT_SID or not settings.TWILIO_AUTH_TOKEN:
        return None
    return Client(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN)


class SmsService:
    """Sends claim notifications.

    Best-effort: a failed send is reported in the result and logged, never
    raised, because the claim already exists and the sender can share the
    link another way.
    """

    def __init__(self, client: Client | None, from_number: str | None = None) -> None:
        self._client = client
        self._from = from_number if from_number is not None else settings.TWILIO_PHONE_NUMBER

    async def send_claim_sms(self, phone: str, amount: str, token: str, claim_url: str) -> SmsResult:
        """
        Text the recipient their claim link.

        Args:
            phone: Recipient in E.164 format
            amount: Amount as shown to the sender
            token: Token symbol
            claim_url: Link to the claim page

        Returns:
            SmsResult with success flag and Twilio message SID or error
        """
        if self._client is None or not self._from:
            logger.warning("SMS not configured; claim link for %s not sent", mask_phone(phone))
            return SmsResult(success=False, error="SMS is not configured")

        try:
            # twilio's Client is synchronous
            message = await asyncio.to_thread(
                self._client.messages.create,
                body=claim_sms_body(amount, token, claim_url),
                from_=self._from,
                to=phone,
            )
        except Exception as exc:
            logger.warning("Failed to send claim SMS to %s: %s", mask_phone(phone), exc)
            return SmsResult(success=False, error=str(exc))

        logger.info("Claim SMS sent to %s, SID %s", mask_phone(phone), message.sid)
        return SmsResult(success=True, message_sid=message.sid)
