"""Shared fakes: a JSON-RPC endpoint behind httpx.MockTransport, an EIP-1193 wallet and a small registry."""

import asyncio
import json
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
import pytest
from eth_abi import decode, encode

from hfvbridge.core.chains import Chain, ChainRegistry
from hfvbridge.core.chains.constants import MULTICALL3
from hfvbridge.errors import RpcError
from hfvbridge.providers.base import PriceProvider
from hfvbridge.services.evm import selector_from_signature

OWNER = "0x1111111111111111111111111111111111111111"
ROUTER = "0x2222222222222222222222222222222222222222"
USDC_ETH = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"
USDC_BASE = "0x833589fcd6edb6e08f4c7c32d4f71b54bda02913"

BALANCE_OF = selector_from_signature("balanceOf(address)")
ALLOWANCE = selector_from_signature("allowance(address,address)")
QUOTE_BRIDGE = selector_from_signature("quoteBridge(address,uint256,uint256,address)")
TRY_AGGREGATE = selector_from_signature("tryAggregate(bool,(address,bytes)[])")


def uint_hex(value: int) -> str:
    return "0x" + encode(["uint256"], [value]).hex()


class RpcFailure(Exception):
    """Raise from a handler to answer with a JSON-RPC error object."""

    def __init__(self, code: int, message: str = "failed"):
        super().__init__(message)
        self.code = code
        self.message = message


class FakeRpc:
    """Answers JSON-RPC requests from per-method handlers and records every call."""

    def __init__(self, handlers: Optional[Dict[str, Any]] = None):
        self.handlers: Dict[str, Any] = dict(handlers or {})
        self.calls: List[Tuple[str, str, List[Any]]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        method, params = body["method"], body.get("params") or []
        self.calls.append((str(request.url), method, params))

        handler = self.handlers.get(method)
        if handler is None:
            return self._error(body["id"], -32601, f"method {method} not found")
        try:
            result = handler(params) if callable(handler) else handler
        except RpcFailure as exc:
            return self._error(body["id"], exc.code, exc.message)
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})

    @staticmethod
    def _error(request_id: Any, code: int, message: str) -> httpx.Response:
        return httpx.Response(
            200,
            json={"jsonrpc": "2.0", "id": request_id, "error": {"code": code, "message": message}},
        )

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def count(self, method: str) -> int:
        return sum(1 for _, name, _ in self.calls if name == method)


class ContractCalls:
    """``eth_call`` handler: Multicall3 ``tryAggregate`` plus per-selector contract stubs."""

    def __init__(
        self,
        balances: Optional[Dict[str, int]] = None,
        *,
        failing_tokens: Tuple[str, ...] = (),
        contracts: Optional[Dict[str, Callable[[bytes], str]]] = None,
    ):
        self.balances = {address.lower(): value for address, value in (balances or {}).items()}
        self.failing_tokens = {address.lower() for address in failing_tokens}
        self.contracts = contracts or {}
        self.aggregate_sizes: List[int] = []

    def __call__(self, params: List[Any]) -> str:
        call = params[0]
        to, data = call["to"].lower(), call["data"]
        selector, payload = data[:10], bytes.fromhex(data[10:])

        if to == MULTICALL3.lower() and selector == TRY_AGGREGATE:
            _, calls = decode(["bool", "(address,bytes)[]"], payload)
            self.aggregate_sizes.append(len(calls))
            results = []
            for target, _ in calls:
                target = target.lower()
                if target in self.failing_tokens:
                    results.append((False, b""))
                else:
                    results.append((True, encode(["uint256"], [self.balances.get(target, 0)])))
            return "0x" + encode(["(bool,bytes)[]"], [results]).hex()

        if selector == BALANCE_OF:
            if to in self.failing_tokens:
                raise RpcFailure(3, "execution reverted")
            return uint_hex(self.balances.get(to, 0))

        handler = self.contracts.get(selector)
        if handler is None:
            raise RpcFailure(3, "execution reverted")
        return handler(payload)


class FakeWalletProvider:
    """In-memory EIP-1193 provider."""

    def __init__(self, accounts=None, chain_id: str = "0x1", responses: Optional[Dict[str, Any]] = None):
        self.accounts = list(accounts if accounts is not None else [OWNER])
        self.chain_id = chain_id
        self.responses: Dict[str, Any] = dict(responses or {})
        self.calls: List[Tuple[str, Optional[List[Any]]]] = []
        self.listeners: Dict[str, List[Callable[..., None]]] = {}
        self._tx_counter = 0

    async def request(self, method: str, params: Optional[List[Any]] = None) -> Any:
        self.calls.append((method, params))
        if method in self.responses:
            response = self.responses[method]
            result = response(params) if callable(response) else response
            if isinstance(result, Exception):
                raise result
            return result
        if method in ("eth_requestAccounts", "eth_accounts"):
            return list(self.accounts)
        if method == "eth_chainId":
            return self.chain_id
        if method == "wallet_switchEthereumChain":
            self.chain_id = params[0]["chainId"]
            return None
        if method == "eth_sendTransaction":
            self._tx_counter += 1
            return "0x" + f"{self._tx_counter:064x}"
        if method == "personal_sign":
            return "0x" + "ab" * 65
        raise RpcError(f"Unsupported method {method}", code=4200)

    def on(self, event: str, callback: Callable[..., None]) -> None:
        self.listeners.setdefault(event, []).append(callback)

    def remove_listener(self, event: str, callback: Callable[..., None]) -> None:
        if callback in self.listeners.get(event, []):
            self.listeners[event].remove(callback)

    def emit(self, event: str, payload: Any = None) -> None:
        for callback in list(self.listeners.get(event, [])):
            callback(payload)

    def methods(self) -> List[str]:
        return [method for method, _ in self.calls]

    def sent_transactions(self) -> List[Dict[str, Any]]:
        return [params[0] for method, params in self.calls if method == "eth_sendTransaction"]


class FakeSurface:
    """Connection surface that yields ``provider`` after ``ready_after`` polls."""

    def __init__(self, provider: Optional[FakeWalletProvider] = None, ready_after: int = 0):
        self.provider = provider
        self.ready_after = ready_after
        self.polls = 0
        self.opened = 0
        self.closed = 0

    async def open(self) -> None:
        self.opened += 1

    async def get_provider(self):
        self.polls += 1
        if self.provider is None or self.polls <= self.ready_after:
            return None
        return self.provider

    async def close(self) -> None:
        self.closed += 1


def make_chain(chain_id: int, **overrides: Any) -> Chain:
    defaults: Dict[int, Dict[str, Any]] = {
        1: dict(key="ethereum", name="Ethereum", symbol="ETH", coingecko_platform="ethereum",
                coingecko_native_id="ethereum", covalent_slug="eth-mainnet"),
        8453: dict(key="base", name="Base", symbol="ETH", coingecko_platform="base",
                   coingecko_native_id="ethereum", covalent_slug="base-mainnet"),
        137: dict(key="polygon", name="Polygon PoS", symbol="MATIC", coingecko_platform="polygon-pos",
                  coingecko_native_id="matic-network", covalent_slug="polygon-mainnet"),
        9745: dict(key="plasma", name="Plasma Mainnet", symbol="XPL"),
    }
    fields: Dict[str, Any] = dict(
        chain_id=chain_id,
        native_name="Ether",
        rpc_url=f"https://rpc.test/{chain_id}",
        explorer_url=f"https://explorer.test/{chain_id}",
        multicall_address=MULTICALL3,
    )
    fields.update(defaults.get(chain_id, dict(key=f"chain{chain_id}", name=f"Chain {chain_id}", symbol="TKN")))
    fields.update(overrides)
    return Chain(**fields)


@pytest.fixture
def registry() -> ChainRegistry:
    return ChainRegistry(
        [
            make_chain(1, router_address=ROUTER),
            make_chain(8453, router_address=ROUTER),
            make_chain(137, multicall_address=None),
            make_chain(9745, rpc_url=None),
        ]
    )


@pytest.fixture
def wallet_provider() -> FakeWalletProvider:
    return FakeWalletProvider()


class FakePriceProvider(PriceProvider):
    """Price provider answering from dicts; ``fail`` makes every call raise an HTTP error."""

    name = "fake_prices"

    def __init__(self, coins: Optional[Dict[str, float]] = None, tokens: Optional[Dict[str, float]] = None):
        self.coins = dict(coins or {})
        self.tokens = {address.lower(): price for address, price in (tokens or {}).items()}
        self.fail = False
        self.delay = 0.0
        self.calls: List[Tuple[str, Any]] = []

    async def _maybe_fail(self) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise httpx.ConnectError("price service unreachable")

    async def ready(self) -> bool:
        return True

    async def health_check(self) -> Dict[str, Any]:
        return {"status": "healthy"}

    async def get_simple_prices(self, coin_ids: List[str]) -> Dict[str, float]:
        self.calls.append(("simple", tuple(coin_ids)))
        await self._maybe_fail()
        return {coin: self.coins[coin] for coin in coin_ids if coin in self.coins}

    async def get_token_prices(self, platform: str, token_addresses: List[str]) -> Dict[str, float]:
        self.calls.append(("tokens", (platform, tuple(token_addresses))))
        await self._maybe_fail()
        return {a.lower(): self.tokens[a.lower()] for a in token_addresses if a.lower() in self.tokens}

    async def get_token_info(self, platform: str, token_address: str) -> Optional[Dict[str, Any]]:
        self.calls.append(("info", (platform, token_address)))
        await self._maybe_fail()
        price = self.tokens.get(token_address.lower())
        if price is None:
            return None
        return {"address": token_address.lower(), "symbol": "TKN", "name": "Token", "decimals": 18, "price_usd": price}
