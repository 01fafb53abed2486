"""
Command pipeline: parse → resolve → plan → confirm → execute.

Every collaborator is passed in by the app at startup; nothing here builds
its own clients.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import assert_never

from lingo.errors import InvalidAmount, InvalidRecipient, PlanError, PlanNotFound, UnsupportedToken
from lingo.models.claim import PendingClaim
from lingo.models.intent import Intent
from lingo.models.plan import ConfirmOutcome, PendingTransactionPlan, PrepareOutcome, TransactionPlan
from lingo.models.recipient import NeedsClaim
from lingo.models.transaction import NewTransaction, TransactionRecord, TransactionType
from lingo.services import command_parser, keywords
from lingo.services.claim_manager import ClaimManager
from lingo.services.executor import TransactionExecutor
from lingo.services.history import TransactionHistory
from lingo.services.planner import TransactionPlanner
from lingo.services.recipient_resolver import RecipientResolver
from lingo.services.sms_service import SmsService
from lingo.services.translator import Translator
from lingo.services.wallet_session import WalletSession
from lingo.utils.phone_hash import mask_phone

logger = logging.getLogger(__name__)

_PLAN_ID_BYTES = 16


@dataclass
class Interpretation:
    intent: Intent
    response: str
    translated_command: str


class PendingPlanBook:
    """
    Plans waiting for the user to confirm or cancel.

    In-process only. A plan leaves the book when it is confirmed, cancelled,
    or recorded after the browser wallet signed it. Past max_plans the oldest
    plan is evicted.
    """

    def __init__(self, max_plans: int = 1000) -> None:
        self._max_plans = max_plans
        self._plans: dict[str, PendingTransactionPlan] = {}

    def park(
        self,
        wallet_address: str,
        plan: TransactionPlan,
        original_command: str | None = None,
        language: str = "en",
    ) -> PendingTransactionPlan:
        pending = PendingTransactionPlan(
            plan_id=secrets.token_urlsafe(_PLAN_ID_BYTES),
            wallet_address=wallet_address,
            plan=plan,
            original_command=original_command,
            language=language,
            created_at=datetime.now(UTC),
        )
        self._plans[pending.plan_id] = pending
        while len(self._plans) > self._max_plans:
            oldest = next(iter(self._plans))
            del self._plans[oldest]
            logger.info("Evicted unconfirmed plan %s", oldest)
        return pending

    def get(self, plan_id: str) -> PendingTransactionPlan | None:
        return self._plans.get(plan_id)

    def discard(self, plan_id: str) -> bool:
        return self._plans.pop(plan_id, None) is not None

    def __len__(self) -> int:
        return len(self._plans)


def _short(address: str) -> str:
    return f"{address[:6]}...{address[-4:]}"


def _history_type(plan: TransactionPlan) -> TransactionType:
    if plan.kind in ("native_transfer", "erc20_transfer"):
        return "send"
    return plan.kind


def _describe(plan: TransactionPlan) -> str:
    if plan.kind in ("native_transfer", "erc20_transfer") and plan.recipient is not None:
        who = plan.recipient.phone or _short(plan.recipient.address)
        return f"Send {plan.amount} {plan.token} to {who}"
    if plan.kind == "bridge":
        return f"Bridge {plan.amount} {plan.token} from {plan.chain} to {plan.to_chain}"
    return f"Swap {plan.amount} {plan.token} to {plan.to_token}"


class CommandPipeline:
    """Wires parser, resolver, claims, planner, executor and history together."""

    def __init__(
        self,
        translator: Translator,
        resolver: RecipientResolver,
        claims: ClaimManager,
        planner: TransactionPlanner,
        executor: TransactionExecutor,
        history: TransactionHistory,
        sms: SmsService,
        plans: PendingPlanBook,
        public_url: str,
    ) -> None:
        self._translator = translator
        self._resolver = resolver
        self._claims = claims
        self._planner = planner
        self._executor = executor
        self._history = history
        self._sms = sms
        self._plans = plans
        self._public_url = public_url.rstrip("/")

    async def interpret(self, text: str, language: str | None = None) -> Interpretation:
        """
        Parse a message in any supported language.

        The message is translated to English before parsing and the reply is
        translated back unless the parser already answered in the user's
        language. Translation failures fall back to the untranslated text.
        """
        lang = keywords.normalize_language(language)
        working = text if lang == keywords.DEFAULT_LANGUAGE else await self._translator.translate(text, "en")
        intent = command_parser.parse(working, lang)

        response = intent.response_text
        if intent.language != lang:
            response = await self._translator.translate(response, lang)
        return Interpretation(intent=intent, response=response, translated_command=working)

    async def prepare(
        self,
        intent: Intent,
        sender: str,
        original_command: str | None = None,
        language: str = "en",
    ) -> PrepareOutcome:
        """
        Resolve and plan an intent, then park it for confirmation.

        A send to a phone with no linked wallet creates a claim instead and
        plans nothing.

        Raises:
            PlanError subclasses for incomplete or invalid intents
        """
        kind = intent.kind
        if kind == "send":
            if not intent.recipient_raw:
                raise InvalidRecipient("Who should receive this? Give a wallet address or phone number.")
            if not intent.token:
                raise UnsupportedToken(intent.response_text or "Which token do you want to send?")
            if not intent.amount:
                raise InvalidAmount(f"How much {intent.token} would you like to send?")
            target = await self._resolver.resolve(intent.recipient_raw)
            if isinstance(target, NeedsClaim):
                return await self.claim_for_phone(target, intent.amount, intent.token, sender)
            plan = await self._planner.plan(
                "send", target, intent.amount, intent.token, chain=intent.from_chain, sender=sender
            )
        elif kind == "swap" or kind == "bridge":
            source = intent.from_token or intent.token
            if not source or not intent.to_token:
                raise UnsupportedToken(intent.response_text or "Which tokens do you want to use?")
            if not intent.amount:
                raise InvalidAmount(f"How much {source} would you like to {kind}?")
            plan = await self._planner.plan(
                kind,
                None,
                intent.amount,
                source,
                chain=intent.from_chain,
                sender=sender,
                to_token=intent.to_token,
                to_chain=intent.to_chain,
            )
        elif kind == "balance" or kind == "buy" or kind == "chat" or kind == "unknown":
            raise PlanError("There is no transaction to prepare for this command")
        else:
            assert_never(kind)

        pending = self._plans.park(sender, plan, original_command=original_command, language=language)
        return PrepareOutcome(kind="plan", pending=pending, message=f"{_describe(plan)}. Confirm to continue.")

    async def claim_for_phone(self, target: NeedsClaim, amount: str, token: str, sender: str) -> PrepareOutcome:
        """Create a claim for an unlinked phone and text the recipient its link (best-effort)."""
        claim_token = await self._claims.create_claim(target.phone, amount, token, sender)
        claim_url = f"{self._public_url}/claim/{claim_token}"
        sms = await self._sms.send_claim_sms(target.phone, amount, token, claim_url)
        if not sms.success:
            logger.warning("Claim created for %s but SMS failed: %s", mask_phone(target.phone), sms.error)

        return PrepareOutcome(
            kind="claim",
            claim_token=claim_token,
            claim_url=claim_url,
            sms_sent=sms.success,
            message=(
                f"{target.phone} doesn't have a wallet yet. "
                + ("We texted them a link to claim " if sms.success else "Share this link so they can claim ")
                + f"{amount} {token}."
            ),
        )

    async def confirm(self, plan_id: str, session: WalletSession) -> ConfirmOutcome:
        """
        Execute a parked plan with the given wallet session.

        The history record is created pending before broadcast, gets the hash
        on success, and is marked failed with the error otherwise.

        Raises:
            PlanNotFound: unknown or cancelled plan, or a plan parked for another wallet
        """
        pending = self._plans.get(plan_id)
        if pending is None or pending.wallet_address.lower() != session.address.lower():
            raise PlanNotFound()
        self._plans.discard(plan_id)

        plan = pending.plan
        record = await self._history.record(
            NewTransaction(
                wallet_address=pending.wallet_address,
                type=_history_type(plan),
                token_in=plan.token,
                token_out=plan.to_token,
                amount_in=plan.amount,
                amount_out=plan.quote.to_amount if plan.quote else None,
                counterparty_address=plan.recipient.address if plan.recipient else None,
                counterparty_phone=plan.recipient.phone if plan.recipient else None,
                chain=plan.chain,
                description=_describe(plan),
                language=pending.language,
                original_command=pending.original_command,
            )
        )

        result = await self._executor.execute(plan, session)
        if result.success:
            await self._history.attach_hash(record.id, result.tx_hash)
        else:
            await self._history.update_status(record.id, "failed", error=result.error)
        return ConfirmOutcome(result=result, transaction_id=record.id)

    def cancel(self, plan_id: str) -> bool:
        """Drop a parked plan. Nothing was broadcast, so nothing else to undo."""
        return self._plans.discard(plan_id)

    def release(self, plan_id: str, wallet_address: str) -> bool:
        """Drop a plan the browser wallet signed itself. Only the wallet it was parked for can release it."""
        pending = self._plans.get(plan_id)
        if pending is None or pending.wallet_address.lower() != wallet_address.lower():
            return False
        return self._plans.discard(plan_id)

    async def record_claim_redemption(self, claim: PendingClaim, wallet_address: str) -> TransactionRecord:
        """
        Record a redeemed claim as a pending "claim" history row.

        The server holds no funds for claims and never sends anything here;
        the row stays pending until the sender's transfer to the redeeming
        wallet is recorded and reconciled.
        """
        record = await self._history.record(
            NewTransaction(
                wallet_address=wallet_address,
                type="claim",
                token_in=claim.token,
                amount_in=claim.amount,
                counterparty_address=claim.sender_address,
                description=f"Claimed {claim.amount} {claim.token}",
            )
        )
        logger.info("Claim redeemed by %s; transfer from %s pending", wallet_address, claim.sender_address)
        return record
