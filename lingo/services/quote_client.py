"""HTTP client for the LI.FI routing API (swap and bridge quotes)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from lingo.config import settings
from lingo.errors import QuoteUnavailable
from lingo.models.plan import TxRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RouteQuote:
    """A quote as returned by the router, amounts in smallest units."""

    to_amount: int
    to_amount_min: int
    gas_cost: str
    approval_address: str | None
    tool: str
    transaction_request: TxRequest


def _to_int(value: Any) -> int | None:
    """LI.FI sends numbers as decimal or 0x-prefixed strings."""
    if value is None or value == "":
        return None
    if isinstance(value, int):
        return value
    return int(str(value), 0)


def _error_message(data: Any) -> str | None:
    if not isinstance(data, dict):
        return None
    error = data.get("error")
    if isinstance(error, dict):
        error = error.get("message")
    return error or data.get("message")


class QuoteClient:
    """HTTP client for LI.FI.

    Takes an httpx.AsyncClient built once by the app and shared across
    requests. Never retries; a failed quote is reported and the user
    reissues the command.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        base_url: str | None = None,
        api_key: str | None = None,
    ) -> None:
        self._http = http
        self._base_url = (base_url or settings.LIFI_API_URL).rstrip("/")
        self._api_key = api_key if api_key is not None else settings.LIFI_API_KEY

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._api_key:
            headers["x-lifi-api-key"] = self._api_key
        return headers

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
    ) -> RouteQuote:
        """
        Request a quote.

        Args:
            from_chain_id: Source chain id
            to_chain_id: Destination chain id (same as source for a swap)
            from_token_address: Source token contract (zero address for native)
            to_token_address: Destination token contract
            from_amount: Source amount in smallest units
            from_address: Wallet that will send the transaction
            slippage: Allowed slippage as a fraction (0.03 = 3%)
            to_address: Receiving wallet, defaults to from_address

        Returns:
            RouteQuote

        Raises:
            QuoteUnavailable: router error, unreachable router, or no transaction request
        """
        params = {
            "fromChain": str(from_chain_id),
            "toChain": str(to_chain_id),
            "fromToken": from_token_address,
            "toToken": to_token_address,
            "fromAmount": str(from_amount),
            "fromAddress": from_address,
            "slippage": str(slippage),
        }
        if to_address:
            params["toAddress"] = to_address

        try:
            response = await self._http.get(f"{self._base_url}/quote", params=params, headers=self._headers())
        except httpx.HTTPError as exc:
            logger.warning("LI.FI quote request failed: %s", exc)
            raise QuoteUnavailable("Quote service is unreachable. Please try again.") from exc

        try:
            data = response.json()
        except ValueError:
            data = None

        message = _error_message(data)
        if message or response.is_error:
            logger.warning("LI.FI quote error (%s): %s", response.status_code, message)
            raise QuoteUnavailable(message or f"Failed to get quote (HTTP {response.status_code})")

        tx = data.get("transactionRequest") if isinstance(data, dict) else None
        if not tx or not tx.get("to"):
            raise QuoteUnavailable("No route found for this trade")

        estimate = data.get("estimate") or {}
        gas_costs = estimate.get("gasCosts") or []
        return RouteQuote(
            to_amount=_to_int(estimate.get("toAmount")) or 0,
            to_amount_min=_to_int(estimate.get("toAmountMin")) or 0,
            gas_cost=str(gas_costs[0].get("amount", "0")) if gas_costs else "0",
            approval_address=estimate.get("approvalAddress"),
            tool=(data.get("toolDetails") or {}).get("name") or data.get("tool") or "LI.FI",
            transaction_request=TxRequest(
                to=tx["to"],
                data=tx.get("data") or "0x",
                value=_to_int(tx.get("value")) or 0,
                gas_limit=_to_int(tx.get("gasLimit")),
            ),
        )

    async def get_status(self, tx_hash: str, from_chain_id: int, to_chain_id: int | None = None) -> str | None:
        """
        Check a cross-chain transfer.

        Returns:
            LI.FI status ("PENDING", "DONE", "FAILED", "NOT_FOUND"), or None if
            the router could not be asked
        """
        params = {"txHash": tx_hash, "fromChain": str(from_chain_id)}
        if to_chain_id is not None:
            params["toChain"] = str(to_chain_id)
        try:
            response = await self._http.get(f"{self._base_url}/status", params=params, headers=self._headers())
            response.raise_for_status()
            return response.json().get("status")
        except (httpx.HTTPError, ValueError):
            logger.warning("LI.FI status check failed for %s", tx_hash)
            return None
