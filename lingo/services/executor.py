"""
Transaction executor and status reconciliation.

execute() puts the wallet on the plan's chain, runs any ERC-20 approval,
broadcasts, and returns the hash without waiting for confirmation.
Confirmation is picked up later by StatusReconciler.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol
from uuid import UUID

from lingo.models.plan import ApprovalRequirement, TransactionPlan, TxRequest, TxResult
from lingo.models.transaction import TransactionRecord
from lingo.services.chain_registry import Chain, get_chain
from lingo.services.history import TransactionHistory
from lingo.services.planner import encode_approve
from lingo.services.wallet_session import ERC20_ABI, UnknownChain, WalletSession

logger = logging.getLogger(__name__)


class WrongChain(Exception):
    """The wallet did not end up on the requested chain."""


class ApprovalFailed(Exception):
    """The approve transaction reverted or was never mined."""


def describe_failure(exc: Exception) -> str:
    """Human-readable reason for a failed submission."""
    text = str(exc) or exc.__class__.__name__
    lowered = text.lower()
    if "insufficient funds" in lowered:
        return "Insufficient funds for this transaction (including gas)"
    if "user rejected" in lowered or "user denied" in lowered or "rejected the request" in lowered:
        return "Transaction was rejected in the wallet"
    return text


class TransactionExecutor:
    """Signs and submits plans through a WalletSession."""

    async def execute(self, plan: TransactionPlan, session: WalletSession) -> TxResult:
        """
        Submit a plan.

        Never raises for wallet or RPC failures; they come back as
        TxResult(success=False, error=...). Nothing is broadcast unless the
        wallet is confirmed to be on the plan's chain.
        """
        chain = get_chain(plan.chain)
        try:
            await self._ensure_chain(session, chain)
            if plan.approval is not None:
                await self._ensure_allowance(session, plan.approval)
            tx_hash = await session.send_transaction(plan.tx)
        except Exception as exc:
            logger.warning("Execution of %s on %s failed: %s", plan.kind, chain.name, exc)
            return TxResult(success=False, error=describe_failure(exc))

        logger.info("Submitted %s %s %s on %s: %s", plan.kind, plan.amount, plan.token, chain.name, tx_hash)
        return TxResult(success=True, tx_hash=tx_hash, explorer_url=chain.tx_url(tx_hash))

    async def _ensure_chain(self, session: WalletSession, chain: Chain) -> None:
        if await session.current_chain_id() == chain.chain_id:
            return
        try:
            await session.switch_chain(chain.chain_id)
        except UnknownChain:
            logger.info("Wallet does not know %s; registering it", chain.display_name)
            await session.add_chain(chain)
            await session.switch_chain(chain.chain_id)
        if await session.current_chain_id() != chain.chain_id:
            raise WrongChain(f"Please switch your wallet to {chain.display_name}")

    async def _ensure_allowance(self, session: WalletSession, approval: ApprovalRequirement) -> None:
        """Approve the spender and wait for the approval to be mined before the main transaction."""
        allowance = await session.read_contract(
            approval.token_address, ERC20_ABI, "allowance", session.address, approval.spender
        )
        if allowance >= approval.amount:
            return

        approve_hash = await session.send_transaction(
            TxRequest(to=approval.token_address, data=encode_approve(approval.spender, approval.amount))
        )
        logger.info("Approval %s submitted for %s", approve_hash, approval.spender)
        receipt = await session.wait_for_receipt(approve_hash)
        if receipt.get("status") != 1:
            raise ApprovalFailed("Token approval failed")


class ReceiptSource(Protocol):
    async def get_receipt(self, chain: str, tx_hash: str) -> dict[str, Any] | None: ...


class BridgeStatusSource(Protocol):
    async def get_status(self, tx_hash: str, from_chain_id: int, to_chain_id: int | None = None) -> str | None: ...


class StatusReconciler:
    """
    Moves pending history records to confirmed or failed from on-chain receipts.

    A receipt with status 1 confirms, 0 fails, no receipt leaves the record
    pending. Bridges also need the router to report the destination leg done.
    """

    def __init__(
        self,
        history: TransactionHistory,
        receipts: ReceiptSource,
        bridge_status: BridgeStatusSource | None = None,
    ) -> None:
        self._history = history
        self._receipts = receipts
        self._bridge_status = bridge_status

    async def reconcile(self, tx_id: UUID) -> TransactionRecord:
        record = await self._history.get(tx_id)
        if record.status != "pending" or not record.tx_hash:
            return record

        receipt = await self._receipts.get_receipt(record.chain, record.tx_hash)
        if receipt is None:
            return record

        if receipt.get("status") != 1:
            return await self._history.update_status(
                record.id, "failed", tx_hash=record.tx_hash, error="Transaction reverted on-chain"
            )

        if record.type == "bridge" and self._bridge_status is not None:
            status = await self._bridge_status.get_status(record.tx_hash, get_chain(record.chain).chain_id)
            if status == "FAILED":
                return await self._history.update_status(
                    record.id, "failed", tx_hash=record.tx_hash, error="Bridge transfer failed"
                )
            if status != "DONE":
                return record

        return await self._history.update_status(record.id, "confirmed", tx_hash=record.tx_hash)
