"""End-to-end pipeline scenarios over in-memory stores and a fake wallet."""

from __future__ import annotations

import pytest
from conftest import LINKED_WALLET, RECIPIENT, SENDER, FakeSms, FakeTranslator, FakeWalletSession
from web3 import Web3

from lingo.errors import InvalidAmount, PlanError, PlanNotFound, QuoteUnavailable
from lingo.models.intent import Intent
from lingo.services.command_parser import parse
from lingo.services.executor import TransactionExecutor
from lingo.services.pipeline import CommandPipeline, PendingPlanBook

pytestmark = pytest.mark.asyncio(loop_scope="session")

PHONE = "+15551234567"


class TestScenarios:
    async def test_send_to_known_address(self, pipeline, history_store, wallet):
        outcome = await pipeline.prepare(parse(f"Send 10 USDC to {RECIPIENT}"), SENDER)

        assert outcome.kind == "plan"
        plan = outcome.pending.plan
        assert plan.kind == "erc20_transfer"
        assert plan.amount_smallest_unit == 10_000_000
        assert history_store.records == {}

        confirmed = await pipeline.confirm(outcome.pending.plan_id, wallet)

        assert confirmed.result.success is True
        record = history_store.records[confirmed.transaction_id]
        assert record.type == "send"
        assert record.status == "pending"
        assert record.tx_hash == confirmed.result.tx_hash
        assert record.counterparty_address == Web3.to_checksum_address(RECIPIENT)
        assert record.wallet_address == SENDER.lower()

    async def test_send_to_unlinked_phone_creates_claim(self, pipeline, claim_store, history_store, sms):
        outcome = await pipeline.prepare(parse(f"Send 10 USDC to {PHONE}"), SENDER)

        assert outcome.kind == "claim"
        assert outcome.pending is None
        assert outcome.claim_url == f"https://lingo.test/claim/{outcome.claim_token}"
        assert outcome.sms_sent is True
        assert sms.sent == [{"phone": PHONE, "amount": "10", "token": "USDC", "claim_url": outcome.claim_url}]

        claim = claim_store.claims[outcome.claim_token]
        assert claim.amount == "10"
        assert claim.sender_address == SENDER
        assert history_store.records == {}

    async def test_send_to_linked_phone(self, pipeline, resolver, claim_store, sms, wallet):
        await resolver.link_phone(PHONE, LINKED_WALLET)

        outcome = await pipeline.prepare(parse("Send 10 USDC to +1 555 123 4567"), SENDER)

        assert outcome.kind == "plan"
        recipient = outcome.pending.plan.recipient
        assert recipient.address == Web3.to_checksum_address(LINKED_WALLET)
        assert recipient.phone == PHONE
        assert PHONE in outcome.message
        assert claim_store.claims == {}
        assert sms.sent == []

    async def test_swap_quote_failure(self, pipeline, quotes, history_store):
        quotes.error = QuoteUnavailable("No available quotes for the requested transfer")

        with pytest.raises(QuoteUnavailable, match="No available quotes"):
            await pipeline.prepare(parse("Swap 0.01 ETH to USDC"), SENDER)
        assert history_store.records == {}


class TestPrepare:
    async def test_claim_still_created_when_sms_fails(
        self, translator, resolver, claims, planner, history, claim_store
    ):
        pipeline = CommandPipeline(
            translator=translator,
            resolver=resolver,
            claims=claims,
            planner=planner,
            executor=TransactionExecutor(),
            history=history,
            sms=FakeSms(success=False),
            plans=PendingPlanBook(),
            public_url="https://lingo.test/",
        )
        outcome = await pipeline.prepare(parse(f"Send 5 USDC to {PHONE}"), SENDER)

        assert outcome.kind == "claim"
        assert outcome.sms_sent is False
        assert "Share this link" in outcome.message
        assert outcome.claim_url.startswith("https://lingo.test/claim/")
        assert outcome.claim_token in claim_store.claims

    async def test_incomplete_send(self, pipeline):
        with pytest.raises(InvalidAmount):
            await pipeline.prepare(parse(f"send USDC to {RECIPIENT}"), SENDER)

    async def test_non_transaction_intent(self, pipeline):
        with pytest.raises(PlanError):
            await pipeline.prepare(Intent(kind="balance"), SENDER)

    async def test_swap_is_parked(self, pipeline):
        outcome = await pipeline.prepare(parse("Swap 0.01 ETH to USDC"), SENDER, original_command="swap", language="es")

        assert outcome.pending.plan.kind == "swap"
        assert outcome.pending.language == "es"
        assert outcome.message.startswith("Swap 0.01 ETH to USDC")


class TestConfirm:
    async def test_confirm_is_single_use(self, pipeline, wallet):
        outcome = await pipeline.prepare(parse(f"Send 1 USDC to {RECIPIENT}"), SENDER)
        await pipeline.confirm(outcome.pending.plan_id, wallet)

        with pytest.raises(PlanNotFound):
            await pipeline.confirm(outcome.pending.plan_id, wallet)

    async def test_cancel_discards_plan(self, pipeline, wallet, history_store):
        outcome = await pipeline.prepare(parse(f"Send 1 USDC to {RECIPIENT}"), SENDER)

        assert pipeline.cancel(outcome.pending.plan_id) is True
        assert pipeline.cancel(outcome.pending.plan_id) is False
        with pytest.raises(PlanNotFound):
            await pipeline.confirm(outcome.pending.plan_id, wallet)
        assert wallet.sent == []
        assert history_store.records == {}

    async def test_other_wallet_cannot_confirm(self, pipeline):
        outcome = await pipeline.prepare(parse(f"Send 1 USDC to {RECIPIENT}"), SENDER)

        with pytest.raises(PlanNotFound):
            await pipeline.confirm(outcome.pending.plan_id, FakeWalletSession(address=RECIPIENT))

    async def test_submission_failure_marks_record_failed(self, pipeline, history_store):
        outcome = await pipeline.prepare(parse(f"Send 1 USDC to {RECIPIENT}"), SENDER)
        wallet = FakeWalletSession(send_error=RuntimeError("User rejected the request."))

        confirmed = await pipeline.confirm(outcome.pending.plan_id, wallet)

        assert confirmed.result.success is False
        record = history_store.records[confirmed.transaction_id]
        assert record.status == "failed"
        assert record.error_message == "Transaction was rejected in the wallet"


class TestInterpret:
    async def test_english_skips_translation(self, pipeline, translator):
        result = await pipeline.interpret("Swap 0.01 ETH to USDC", "en")

        assert result.intent.kind == "swap"
        assert result.response == "Preparing to swap 0.01 ETH to USDC..."
        assert translator.calls == []

    async def test_translates_in_and_out(self, resolver, claims, planner, history, sms):
        translator = FakeTranslator(
            {
                ("intercambia 1 ETH por USDC", "en"): "swap 1 ETH for USDC",
                ("Preparing to swap 1 ETH to USDC...", "es"): "Preparando el intercambio de 1 ETH a USDC...",
            }
        )
        pipeline = CommandPipeline(
            translator=translator,
            resolver=resolver,
            claims=claims,
            planner=planner,
            executor=TransactionExecutor(),
            history=history,
            sms=sms,
            plans=PendingPlanBook(),
            public_url="https://lingo.test",
        )

        result = await pipeline.interpret("intercambia 1 ETH por USDC", "es")

        assert result.translated_command == "swap 1 ETH for USDC"
        assert result.intent.kind == "swap"
        assert result.response == "Preparando el intercambio de 1 ETH a USDC..."

    async def test_localized_reply_is_not_retranslated(self, pipeline, translator):
        result = await pipeline.interpret("hola", "es")

        assert result.intent.language == "es"
        assert result.response.startswith("¡Hola!")
        assert translator.calls == [("hola", "en")]


class TestPendingPlans:
    async def test_book_evicts_oldest_past_capacity(self, translator, resolver, claims, planner, history, sms):
        book = PendingPlanBook(max_plans=3)
        pipeline = CommandPipeline(
            translator=translator,
            resolver=resolver,
            claims=claims,
            planner=planner,
            executor=TransactionExecutor(),
            history=history,
            sms=sms,
            plans=book,
            public_url="https://lingo.test",
        )
        ids = []
        for _ in range(50):
            outcome = await pipeline.prepare(parse(f"Send 1 USDC to {RECIPIENT}"), SENDER)
            ids.append(outcome.pending.plan_id)

        assert len(book) == 3
        assert book.get(ids[0]) is None
        assert [book.get(i) is not None for i in ids[-3:]] == [True, True, True]

    async def test_release_drops_browser_signed_plan(self, pipeline):
        outcome = await pipeline.prepare(parse(f"Send 1 USDC to {RECIPIENT}"), SENDER)
        plan_id = outcome.pending.plan_id

        assert pipeline.release(plan_id, RECIPIENT) is False
        assert pipeline.release(plan_id, SENDER.upper().replace("0X", "0x")) is True
        assert pipeline.release(plan_id, SENDER) is False

        with pytest.raises(PlanNotFound):
            await pipeline.confirm(plan_id, FakeWalletSession())


class TestClaimRedemption:
    async def test_redemption_is_recorded_pending(self, pipeline, claims, history_store):
        token = await claims.create_claim(PHONE, "10", "USDC", SENDER)
        claim = await claims.redeem_claim(token, RECIPIENT)

        record = await pipeline.record_claim_redemption(claim, RECIPIENT)

        assert history_store.records[record.id] == record
        assert record.type == "claim"
        assert record.status == "pending"
        assert record.tx_hash is None
        assert record.wallet_address == RECIPIENT.lower()
        assert record.counterparty_address == SENDER

    async def test_unfunded_claim_moves_nothing(self, pipeline, claims, history_store, wallet):
        outcome = await pipeline.prepare(parse("Send 1000 ETH to +15550001111"), LINKED_WALLET)
        assert outcome.kind == "claim"

        claim = await claims.redeem_claim(outcome.claim_token, RECIPIENT)
        record = await pipeline.record_claim_redemption(claim, RECIPIENT)

        assert wallet.sent == []
        assert [r.status for r in history_store.records.values()] == ["pending"]
        assert record.tx_hash is None
