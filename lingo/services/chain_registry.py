"""
Token and chain registry.

Static, process-wide data: supported chains (id, RPC, explorer) and the
tokens the wallet understands on each of them. Nothing here is mutated at
runtime.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType

from lingo.config import settings
from lingo.errors import UnsupportedChain, UnsupportedToken

NATIVE_TOKEN_ADDRESS = "0x0000000000000000000000000000000000000000"

# Closed allowlist of symbols the parser and planner accept
SUPPORTED_TOKENS: frozenset[str] = frozenset({"ETH", "USDC", "USDT", "DAI", "WETH"})


@dataclass(frozen=True)
class Token:
    """One token on one chain."""

    symbol: str
    address: str
    decimals: int

    @property
    def is_native(self) -> bool:
        return self.address == NATIVE_TOKEN_ADDRESS


@dataclass(frozen=True)
class Chain:
    """An EVM chain the wallet can operate on."""

    name: str
    chain_id: int
    display_name: str
    native_symbol: str
    default_rpc_url: str
    explorer_url: str

    @property
    def rpc_url(self) -> str:
        return settings.rpc_url(self.name) or self.default_rpc_url

    def tx_url(self, tx_hash: str) -> str:
        return f"{self.explorer_url}/tx/{tx_hash}"


_CHAINS: dict[str, Chain] = {
    "base": Chain("base", 8453, "Base", "ETH", "https://mainnet.base.org", "https://basescan.org"),
    "ethereum": Chain("ethereum", 1, "Ethereum", "ETH", "https://eth.llamarpc.com", "https://etherscan.io"),
    "arbitrum": Chain("arbitrum", 42161, "Arbitrum One", "ETH", "https://arb1.arbitrum.io/rpc", "https://arbiscan.io"),
    "optimism": Chain(
        "optimism", 10, "OP Mainnet", "ETH", "https://mainnet.optimism.io", "https://optimistic.etherscan.io"
    ),
    "polygon": Chain("polygon", 137, "Polygon", "POL", "https://polygon-rpc.com", "https://polygonscan.com"),
}

_TOKENS: dict[str, dict[str, Token]] = {
    "base": {
        "ETH": Token("ETH", NATIVE_TOKEN_ADDRESS, 18),
        "WETH": Token("WETH", "0x4200000000000000000000000000000000000006", 18),
        "USDC": Token("USDC", "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913", 6),
        "USDT": Token("USDT", "0xfde4C96c8593536E31F229EA8f37b2ADa2699bb2", 6),
        "DAI": Token("DAI", "0x50c5725949A6F0c72E6C4a641F24049A917DB0Cb", 18),
    },
    "ethereum": {
        "ETH": Token("ETH", NATIVE_TOKEN_ADDRESS, 18),
        "USDC": Token("USDC", "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48", 6),
    },
    "arbitrum": {
        "ETH": Token("ETH", NATIVE_TOKEN_ADDRESS, 18),
        "USDC": Token("USDC", "0xaf88d065e77c8cC2239327C5EDb3A432268e5831", 6),
    },
    "optimism": {
        "ETH": Token("ETH", NATIVE_TOKEN_ADDRESS, 18),
        "USDC": Token("USDC", "0x0b2C639c533813f4Aa9D7837CAf62653d097Ff85", 6),
    },
    "polygon": {
        "USDC": Token("USDC", "0x3c499c542cEF5E3811e1192ce70d8cC03d5c3359", 6),
    },
}

CHAINS = MappingProxyType(_CHAINS)

# Names people type for chains, mapped to registry keys
CHAIN_ALIASES: dict[str, str] = {
    "base": "base",
    "ethereum": "ethereum",
    "eth": "ethereum",
    "mainnet": "ethereum",
    "arbitrum": "arbitrum",
    "arb": "arbitrum",
    "optimism": "optimism",
    "op": "optimism",
    "polygon": "polygon",
    "matic": "polygon",
}


def normalize_chain_name(name: str | None) -> str | None:
    """Map a user-typed chain name to a registry key, or None if unknown."""
    if not name:
        return None
    return CHAIN_ALIASES.get(name.strip().lower())


def get_chain(name: str | None = None) -> Chain:
    """
    Look up a chain by name or alias. None means the configured default.

    Raises:
        UnsupportedChain: if the chain is not in the registry
    """
    key = normalize_chain_name(name or settings.DEFAULT_CHAIN)
    if key is None or key not in _CHAINS:
        raise UnsupportedChain(f"Chain '{name}' is not supported. Supported chains: {', '.join(_CHAINS)}")
    return _CHAINS[key]


def get_chain_by_id(chain_id: int) -> Chain:
    for chain in _CHAINS.values():
        if chain.chain_id == chain_id:
            return chain
    raise UnsupportedChain(f"Chain id {chain_id} is not supported")


def get_token(symbol: str, chain: str | None = None) -> Token:
    """
    Look up a token on a chain.

    Raises:
        UnsupportedChain: if the chain is unknown
        UnsupportedToken: if the symbol is not allowlisted or not deployed on that chain
    """
    resolved = get_chain(chain)
    upper = symbol.strip().upper()
    if upper not in SUPPORTED_TOKENS:
        raise UnsupportedToken(f"Token '{symbol}' is not supported. Supported tokens: {', '.join(sorted(SUPPORTED_TOKENS))}")
    token = _TOKENS.get(resolved.name, {}).get(upper)
    if token is None:
        raise UnsupportedToken(f"{upper} is not available on {resolved.display_name}")
    return token


def explorer_tx_url(chain: str, tx_hash: str) -> str:
    return get_chain(chain).tx_url(tx_hash)


def is_supported_symbol(symbol: str | None) -> bool:
    return bool(symbol) and symbol.upper() in SUPPORTED_TOKENS
