"""Tests for the LI.FI client against a mocked transport."""

from __future__ import annotations

import httpx
import pytest

from lingo.errors import QuoteUnavailable
from lingo.services.quote_client import QuoteClient

pytestmark = pytest.mark.asyncio(loop_scope="session")

SENDER = "0x1111111111111111111111111111111111111111"

QUOTE_RESPONSE = {
    "tool": "uniswap",
    "toolDetails": {"name": "Uniswap V3"},
    "estimate": {
        "toAmount": "25000000",
        "toAmountMin": "24250000",
        "approvalAddress": "0x1231DEB6f5749EF6cE6943a275A1D3E7486F4EaE",
        "gasCosts": [{"amount": "150000000000000"}],
    },
    "transactionRequest": {
        "to": "0x1231DEB6f5749EF6cE6943a275A1D3E7486F4EaE",
        "data": "0xabcdef",
        "value": "0x2386f26fc10000",
        "gasLimit": "0x493e0",
    },
}


def _client(handler, api_key="") -> tuple[QuoteClient, httpx.AsyncClient]:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return QuoteClient(http, base_url="https://li.test/v1", api_key=api_key), http


async def _quote(client: QuoteClient):
    return await client.get_quote(
        from_chain_id=8453,
        to_chain_id=8453,
        from_token_address="0x0000000000000000000000000000000000000000",
        to_token_address="0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913",
        from_amount=10**16,
        from_address=SENDER,
        slippage=0.03,
    )


async def test_parses_quote():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=QUOTE_RESPONSE)

    client, http = _client(handler, api_key="secret")
    async with http:
        route = await _quote(client)

    assert route.to_amount == 25_000_000
    assert route.to_amount_min == 24_250_000
    assert route.gas_cost == "150000000000000"
    assert route.tool == "Uniswap V3"
    assert route.transaction_request.value == 10**16
    assert route.transaction_request.gas_limit == 300_000
    assert route.transaction_request.data == "0xabcdef"

    request = seen[0]
    assert request.url.path == "/v1/quote"
    assert request.url.params["fromChain"] == "8453"
    assert request.url.params["fromAmount"] == str(10**16)
    assert request.url.params["slippage"] == "0.03"
    assert "toAddress" not in request.url.params
    assert request.headers["x-lifi-api-key"] == "secret"


async def test_no_api_key_header_without_key():
    def handler(request: httpx.Request) -> httpx.Response:
        assert "x-lifi-api-key" not in request.headers
        return httpx.Response(200, json=QUOTE_RESPONSE)

    client, http = _client(handler)
    async with http:
        await _quote(client)


async def test_router_error_message_is_verbatim():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"message": "No available quotes for the requested transfer", "code": 1002})

    client, http = _client(handler)
    async with http:
        with pytest.raises(QuoteUnavailable, match="^No available quotes for the requested transfer$"):
            await _quote(client)


async def test_error_without_body():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="bad gateway")

    client, http = _client(handler)
    async with http:
        with pytest.raises(QuoteUnavailable, match="HTTP 502"):
            await _quote(client)


async def test_missing_transaction_request():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"estimate": QUOTE_RESPONSE["estimate"]})

    client, http = _client(handler)
    async with http:
        with pytest.raises(QuoteUnavailable, match="No route found"):
            await _quote(client)


async def test_unreachable():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client, http = _client(handler)
    async with http:
        with pytest.raises(QuoteUnavailable, match="unreachable"):
            await _quote(client)


async def test_get_status():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/v1/status"
        assert request.url.params["txHash"] == "0xabc"
        return httpx.Response(200, json={"status": "DONE", "substatus": "COMPLETED"})

    client, http = _client(handler)
    async with http:
        assert await client.get_status("0xabc", 8453) == "DONE"


async def test_get_status_failure_is_none():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500)

    client, http = _client(handler)
    async with http:
        assert await client.get_status("0xabc", 8453) is None
