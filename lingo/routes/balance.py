"""Wallet balance route."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from lingo.deps import get_chain_reader
from lingo.errors import InvalidRecipient
from lingo.models.balance import BalanceRequest
from lingo.services.chain_registry import get_chain, get_token
from lingo.services.command_parser import is_address
from lingo.services.planner import format_units
from lingo.services.wallet_session import ChainReader

router = APIRouter(prefix="/api", tags=["balance"])

_NATIVE_PLACES = 4
_USDC_PLACES = 2


@router.post("/get-balance", status_code=200)
async def get_balance(req: BalanceRequest, reader: ChainReader = Depends(get_chain_reader)) -> dict:
    """Native and USDC balances for a wallet on one chain."""
    if not is_address(req.wallet_address):
        raise InvalidRecipient("Invalid wallet address")

    chain = get_chain(req.chain)
    usdc = get_token("USDC", chain.name)
    native_units = await reader.get_balance(chain.name, req.wallet_address)
    usdc_units = await reader.erc20_balance(chain.name, usdc.address, req.wallet_address)

    return {
        "success": True,
        "chain": chain.name,
        "balances": {
            chain.native_symbol: format_units(native_units, 18, _NATIVE_PLACES),
            "USDC": format_units(usdc_units, usdc.decimals, _USDC_PLACES),
        },
    }
