"""
Wallet sessions and chain reads.

User keys live with the embedded-wallet provider; the executor only drives a
WalletSession it is handed. LocalAccountSession is the server-held variant
(the demo signer) built on eth_account and AsyncWeb3.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any, Protocol

from eth_account import Account
from web3 import AsyncWeb3, Web3
from web3.exceptions import TransactionNotFound

from lingo.models.plan import TxRequest
from lingo.services.chain_registry import CHAINS, Chain, get_chain

logger = logging.getLogger(__name__)

ERC20_ABI: list[dict[str, Any]] = [
    {
        "constant": True,
        "inputs": [{"name": "owner", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [{"name": "owner", "type": "address"}, {"name": "spender", "type": "address"}],
        "name": "allowance",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
]

_GAS_BUFFER = 1.1
_RECEIPT_TIMEOUT_SECONDS = 120


class UnknownChain(Exception):
    """The wallet has no configuration for the requested chain (EIP-3085 error 4902)."""

    def __init__(self, chain_id: int):
        super().__init__(f"Wallet does not know chain {chain_id}")
        self.chain_id = chain_id


class WalletSession(Protocol):
    """What the executor needs from a connected wallet."""

    address: str

    async def current_chain_id(self) -> int: ...

    async def switch_chain(self, chain_id: int) -> None: ...

    async def add_chain(self, chain: Chain) -> None: ...

    async def send_transaction(self, tx: TxRequest) -> str: ...

    async def read_contract(self, address: str, abi: list[dict[str, Any]], function: str, *args: Any) -> Any: ...

    async def get_balance(self, address: str) -> int: ...

    async def wait_for_receipt(self, tx_hash: str, timeout: float = _RECEIPT_TIMEOUT_SECONDS) -> dict[str, Any]: ...


def make_web3(chain: Chain) -> AsyncWeb3:
    return AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(chain.rpc_url))


def add_chain_params(chain: Chain) -> dict[str, Any]:
    """wallet_addEthereumChain parameters for a browser wallet."""
    return {
        "chainId": hex(chain.chain_id),
        "chainName": chain.display_name,
        "nativeCurrency": {"name": chain.native_symbol, "symbol": chain.native_symbol, "decimals": 18},
        "rpcUrls": [chain.rpc_url],
        "blockExplorerUrls": [chain.explorer_url],
    }


class LocalAccountSession:
    """
    Signing session over a server-held private key.

    Knows only the chains it was configured with; switching to any other
    raises UnknownChain until add_chain() registers it.
    """

    def __init__(
        self,
        private_key: str,
        chains: Iterable[Chain] | None = None,
        default_chain: str | None = None,
        web3_factory: Callable[[Chain], AsyncWeb3] = make_web3,
    ) -> None:
        self._account = Account.from_key(private_key)
        self.address: str = self._account.address
        self._web3_factory = web3_factory
        self._providers: dict[int, AsyncWeb3] = {}
        for chain in chains if chains is not None else CHAINS.values():
            self._providers[chain.chain_id] = web3_factory(chain)
        self._current = get_chain(default_chain).chain_id

    @property
    def _w3(self) -> AsyncWeb3:
        if self._current not in self._providers:
            raise UnknownChain(self._current)
        return self._providers[self._current]

    async def current_chain_id(self) -> int:
        return self._current

    async def switch_chain(self, chain_id: int) -> None:
        if chain_id not in self._providers:
            raise UnknownChain(chain_id)
        self._current = chain_id

    async def add_chain(self, chain: Chain) -> None:
        if chain.chain_id not in self._providers:
            self._providers[chain.chain_id] = self._web3_factory(chain)
            logger.info("Registered chain %s (%s) with signer session", chain.display_name, chain.chain_id)

    async def send_transaction(self, tx: TxRequest) -> str:
        """
        Sign and broadcast. Returns as soon as the node accepts the transaction.

        Returns:
            Transaction hash as 0x-prefixed hex
        """
        w3 = self._w3
        params: dict[str, Any] = {
            "from": self.address,
            "to": Web3.to_checksum_address(tx.to),
            "value": tx.value,
            "data": tx.data or "0x",
            "chainId": self._current,
            "nonce": await w3.eth.get_transaction_count(self.address, "pending"),
            "gasPrice": await w3.eth.gas_price,
        }
        if tx.gas_limit:
            params["gas"] = tx.gas_limit
        else:
            estimate = await w3.eth.estimate_gas(params)
            params["gas"] = int(estimate * _GAS_BUFFER)

        signed = self._account.sign_transaction(params)
        tx_hash = await w3.eth.send_raw_transaction(signed.raw_transaction)
        hex_hash = Web3.to_hex(tx_hash)
        logger.info("Broadcast %s on chain %s", hex_hash, self._current)
        return hex_hash

    async def read_contract(self, address: str, abi: list[dict[str, Any]], function: str, *args: Any) -> Any:
        contract = self._w3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)
        return await contract.functions[function](*args).call()

    async def get_balance(self, address: str) -> int:
        return await self._w3.eth.get_balance(Web3.to_checksum_address(address))

    async def wait_for_receipt(self, tx_hash: str, timeout: float = _RECEIPT_TIMEOUT_SECONDS) -> dict[str, Any]:
        receipt = await self._w3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)
        return dict(receipt)


class ChainReader:
    """Read-only chain access for balances and receipt reconciliation."""

    def __init__(self, web3_factory: Callable[[Chain], AsyncWeb3] = make_web3) -> None:
        self._web3_factory = web3_factory
        self._clients: dict[str, AsyncWeb3] = {}

    def web3(self, chain: str | None = None) -> AsyncWeb3:
        resolved = get_chain(chain)
        if resolved.name not in self._clients:
            self._clients[resolved.name] = self._web3_factory(resolved)
        return self._clients[resolved.name]

    async def get_receipt(self, chain: str, tx_hash: str) -> dict[str, Any] | None:
        """The receipt if the transaction is mined, None while it is still pending."""
        try:
            receipt = await self.web3(chain).eth.get_transaction_receipt(tx_hash)
        except TransactionNotFound:
            return None
        return dict(receipt) if receipt is not None else None

    async def get_balance(self, chain: str, address: str) -> int:
        return await self.web3(chain).eth.get_balance(Web3.to_checksum_address(address))

    async def erc20_balance(self, chain: str, token_address: str, owner: str) -> int:
        contract = self.web3(chain).eth.contract(address=Web3.to_checksum_address(token_address), abi=ERC20_ABI)
        return await contract.functions.balanceOf(Web3.to_checksum_address(owner)).call()
