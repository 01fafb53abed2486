"""
Transaction planner.

Turns a resolved intent into a TransactionPlan: a native transfer, an ERC-20
transfer, or a quote-backed swap/bridge. Every failure is raised as a
PlanError subclass before any wallet interaction happens.

Amounts: the user's decimal string is scaled to the token's smallest unit and
floored, never rounded up.
"""

from __future__ import annotations

import logging
from decimal import ROUND_DOWN, Decimal, InvalidOperation, localcontext
from typing import Literal, Protocol

from eth_abi import encode
from web3 import Web3

from lingo.config import settings
from lingo.errors import InvalidAmount, InvalidRecipient, PlanError, UnsupportedChain
from lingo.models.plan import ApprovalRequirement, SwapQuote, TransactionPlan, TxRequest
from lingo.models.recipient import ResolvedRecipient
from lingo.services.chain_registry import Chain, Token, get_chain, get_token
from lingo.services.quote_client import RouteQuote

logger = logging.getLogger(__name__)

PlanIntent = Literal["send", "swap", "bridge"]

TRANSFER_SELECTOR = bytes(Web3.keccak(text="transfer(address,uint256)")[:4])
APPROVE_SELECTOR = bytes(Web3.keccak(text="approve(address,uint256)")[:4])

_DISPLAY_PLACES = 6


class QuoteSource(Protocol):
    async def get_quote(
        self,
        from_chain_id: int,
        to_chain_id: int,
        from_token_address: str,
        to_token_address: str,
        from_amount: int,
        from_address: str,
        slippage: float,
        to_address: str | None = None,
    ) -> RouteQuote: ...


def to_smallest_unit(amount: str, decimals: int) -> int:
    """
    Scale a decimal amount string to integer smallest units, flooring.

    to_smallest_unit("1.23456789", 6) == 1234567

    Raises:
        InvalidAmount: non-numeric, non-positive, or below one smallest unit
    """
    with localcontext() as ctx:
        ctx.prec = 100
        try:
            value = Decimal(str(amount).strip())
        except InvalidOperation as exc:
            raise InvalidAmount(f"'{amount}' is not a valid amount") from exc
        if not value.is_finite() or value <= 0:
            raise InvalidAmount("Amount must be greater than zero")
        units = (value * (Decimal(10) ** decimals)).to_integral_value(rounding=ROUND_DOWN)
    if units <= 0:
        raise InvalidAmount(f"{amount} is smaller than the token's smallest unit")
    return int(units)


def format_units(units: int, decimals: int, places: int = _DISPLAY_PLACES) -> str:
    """Smallest units back to a display string, truncated to `places` decimals."""
    with localcontext() as ctx:
        ctx.prec = 100
        value = Decimal(units).scaleb(-decimals)
        return str(value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_DOWN))


def encode_transfer(to: str, amount: int) -> str:
    """Calldata for ERC-20 transfer(to, amount)."""
    return "0x" + (TRANSFER_SELECTOR + encode(["address", "uint256"], [to, amount])).hex()


def encode_approve(spender: str, amount: int) -> str:
    """Calldata for ERC-20 approve(spender, amount)."""
    return "0x" + (APPROVE_SELECTOR + encode(["address", "uint256"], [spender, amount])).hex()


def checksum(address: str | None, what: str = "recipient") -> str:
    if not address or not Web3.is_address(address):
        raise InvalidRecipient(f"Invalid {what} address: {address}")
    return Web3.to_checksum_address(address)


class TransactionPlanner:
    """Builds executable plans. Quotes come from an injected router client."""

    def __init__(self, quotes: QuoteSource) -> None:
        self._quotes = quotes

    async def plan(
        self,
        kind: PlanIntent,
        recipient: ResolvedRecipient | None,
        amount: str,
        token: str,
        chain: str | None = None,
        sender: str | None = None,
        to_token: str | None = None,
        to_chain: str | None = None,
    ) -> TransactionPlan:
        """
        Build a plan for a send, swap or bridge.

        Args:
            kind: "send", "swap" or "bridge"
            recipient: Destination for sends (and optional bridge receiver)
            amount: Decimal amount string in the source token
            token: Source token symbol
            chain: Source chain name, defaults to the configured chain
            sender: Sending wallet, required for swap/bridge quotes
            to_token: Destination token for swaps (bridges default to `token`)
            to_chain: Destination chain for bridges

        Raises:
            UnsupportedToken, UnsupportedChain, InvalidAmount, InvalidRecipient,
            QuoteUnavailable, PlanError
        """
        if kind == "send":
            return self._plan_send(recipient, amount, token, get_chain(chain))
        if kind == "swap":
            if not to_token:
                raise PlanError("Which token do you want to swap to?")
            return await self._plan_swap(amount, token, to_token, get_chain(chain), sender)
        if kind == "bridge":
            if not to_chain:
                raise UnsupportedChain("Which chain do you want to bridge to?")
            return await self._plan_bridge(
                recipient, amount, token, to_token or token, get_chain(chain), get_chain(to_chain), sender
            )
        raise PlanError(f"Cannot plan a '{kind}' transaction")

    async def quote(
        self,
        from_token: str,
        to_token: str,
        amount: str,
        sender: str,
        chain: str | None = None,
    ) -> SwapQuote:
        """Quote-only view of a swap, for showing the user before they commit."""
        plan = await self._plan_swap(amount, from_token, to_token, get_chain(chain), sender)
        return plan.quote

    def _plan_send(
        self,
        recipient: ResolvedRecipient | None,
        amount: str,
        symbol: str,
        chain: Chain,
    ) -> TransactionPlan:
        if recipient is None:
            raise InvalidRecipient("Who should receive this? Give a wallet address or phone number.")
        to = checksum(recipient.address)
        token = get_token(symbol, chain.name)
        units = to_smallest_unit(amount, token.decimals)
        resolved = recipient.model_copy(update={"address": to})

        if token.is_native:
            return TransactionPlan(
                kind="native_transfer",
                chain=chain.name,
                token=token.symbol,
                amount=amount,
                amount_smallest_unit=units,
                recipient=resolved,
                tx=TxRequest(to=to, value=units),
            )

        return TransactionPlan(
            kind="erc20_transfer",
            chain=chain.name,
            token=token.symbol,
            amount=amount,
            amount_smallest_unit=units,
            recipient=resolved,
            tx=TxRequest(to=Web3.to_checksum_address(token.address), data=encode_transfer(to, units)),
        )

    async def _plan_swap(
        self,
        amount: str,
        from_symbol: str,
        to_symbol: str,
        chain: Chain,
        sender: str | None,
    ) -> TransactionPlan:
        from_address = checksum(sender, "sender")
        source = get_token(from_symbol, chain.name)
        target = get_token(to_symbol, chain.name)
        if source.symbol == target.symbol:
            raise PlanError(f"Cannot swap {source.symbol} for itself")
        units = to_smallest_unit(amount, source.decimals)

        route = await self._quotes.get_quote(
            from_chain_id=chain.chain_id,
            to_chain_id=chain.chain_id,
            from_token_address=source.address,
            to_token_address=target.address,
            from_amount=units,
            from_address=from_address,
            slippage=settings.SWAP_SLIPPAGE,
        )
        logger.info("Swap quote %s %s → %s on %s via %s", amount, source.symbol, target.symbol, chain.name, route.tool)

        return TransactionPlan(
            kind="swap",
            chain=chain.name,
            token=source.symbol,
            to_token=target.symbol,
            amount=amount,
            amount_smallest_unit=units,
            tx=route.transaction_request,
            quote=_to_swap_quote(route, source, target, amount),
            approval=_approval_for(route, source, units),
        )

    async def _plan_bridge(
        self,
        recipient: ResolvedRecipient | None,
        amount: str,
        from_symbol: str,
        to_symbol: str,
        from_chain: Chain,
        to_chain: Chain,
        sender: str | None,
    ) -> TransactionPlan:
        if from_chain.name == to_chain.name:
            raise PlanError(f"Your {from_symbol.upper()} is already on {to_chain.display_name}")
        from_address = checksum(sender, "sender")
        receiver = checksum(recipient.address) if recipient else from_address
        source = get_token(from_symbol, from_chain.name)
        target = get_token(to_symbol, to_chain.name)
        units = to_smallest_unit(amount, source.decimals)

        route = await self._quotes.get_quote(
            from_chain_id=from_chain.chain_id,
            to_chain_id=to_chain.chain_id,
            from_token_address=source.address,
            to_token_address=target.address,
            from_amount=units,
            from_address=from_address,
            slippage=settings.BRIDGE_SLIPPAGE,
            to_address=receiver,
        )
        logger.info("Bridge quote %s %s %s → %s via %s", amount, source.symbol, from_chain.name, to_chain.name, route.tool)

        return TransactionPlan(
            kind="bridge",
            chain=from_chain.name,
            to_chain=to_chain.name,
            token=source.symbol,
            to_token=target.symbol,
            amount=amount,
            amount_smallest_unit=units,
            recipient=ResolvedRecipient(address=receiver),
            tx=route.transaction_request,
            quote=_to_swap_quote(route, source, target, amount),
            approval=_approval_for(route, source, units),
        )


def _to_swap_quote(route: RouteQuote, source: Token, target: Token, amount: str) -> SwapQuote:
    return SwapQuote(
        from_token=source.symbol,
        to_token=target.symbol,
        from_amount=amount,
        to_amount=format_units(route.to_amount, target.decimals),
        to_amount_min=format_units(route.to_amount_min, target.decimals),
        estimated_gas=route.gas_cost,
        route=route.tool,
        transaction_request=route.transaction_request,
    )


def _approval_for(route: RouteQuote, source: Token, units: int) -> ApprovalRequirement | None:
    """An ERC-20 source needs an allowance unless the router calls the token contract itself."""
    if source.is_native:
        return None
    spender = route.approval_address or route.transaction_request.to
    if spender.lower() == source.address.lower():
        return None
    return ApprovalRequirement(
        token_address=Web3.to_checksum_address(source.address),
        spender=Web3.to_checksum_address(spender),
        amount=units,
    )
