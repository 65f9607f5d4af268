"""
EIP-1193 provider interface and the HTTP wallet implementation.

The wallet is reached through an object exposing ``request``/``on``/
``remove_listener``. ``HttpWalletProvider`` talks JSON-RPC to a local wallet
endpoint (Frame listens on ``http://127.0.0.1:1248``) and surfaces account and
chain changes through ``refresh()`` polling.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Protocol, runtime_checkable

import httpx

from ...config import settings
from ...errors import RpcError
from ...providers.rpc import JsonRpcClient

logger = logging.getLogger(__name__)

# EIP-1193 / EIP-3085 provider error codes
USER_REJECTED = 4001
UNAUTHORIZED = 4100
UNRECOGNIZED_CHAIN = 4902

ProviderListener = Callable[..., None]


@runtime_checkable
class EIP1193Provider(Protocol):
    async def request(self, method: str, params: Optional[List[Any]] = None) -> Any:
        ...

    def on(self, event: str, callback: ProviderListener) -> None:
        ...

    def remove_listener(self, event: str, callback: ProviderListener) -> None:
        ...


class ConnectionSurface(Protocol):
    """Where a provider handle comes from (an injected wallet, a modal, a local endpoint)."""

    async def open(self) -> None:
        ...

    async def get_provider(self) -> Optional[EIP1193Provider]:
        """Return a usable provider, or None if none is available yet."""
        ...

    async def close(self) -> None:
        ...


class HttpWalletProvider:
    """EIP-1193 provider backed by a JSON-RPC wallet endpoint."""

    def __init__(
        self,
        url: Optional[str] = None,
        *,
        timeout_s: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.url = url or settings.wallet_rpc_url
        self._rpc = JsonRpcClient(
            self.url,
            timeout_s=timeout_s or settings.request_timeout_seconds,
            transport=transport,
        )
        self._listeners: Dict[str, List[ProviderListener]] = {}
        self._accounts: Optional[List[str]] = None
        self._chain_id: Optional[str] = None

    async def request(self, method: str, params: Optional[List[Any]] = None) -> Any:
        return await self._rpc.call(method, params)

    def on(self, event: str, callback: ProviderListener) -> None:
        callbacks = self._listeners.setdefault(event, [])
        if callback not in callbacks:
            callbacks.append(callback)

    def remove_listener(self, event: str, callback: ProviderListener) -> None:
        callbacks = self._listeners.get(event, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def _emit(self, event: str, payload: Any) -> None:
        for callback in list(self._listeners.get(event, [])):
            callback(payload)

    async def refresh(self) -> None:
        """Poll accounts and chain, emitting provider events for anything that changed."""

        try:
            accounts = await self.request("eth_accounts") or []
            chain_id = await self.request("eth_chainId")
        except (RpcError, httpx.HTTPError) as exc:
            if self._accounts is not None:
                logger.warning("Wallet endpoint %s unreachable: %s", self.url, exc)
                self._accounts = None
                self._chain_id = None
                self._emit("disconnect", {"code": 4900, "message": str(exc)})
            return

        if self._accounts is not None and accounts != self._accounts:
            self._emit("accountsChanged", accounts)
        if self._chain_id is not None and chain_id != self._chain_id:
            self._emit("chainChanged", chain_id)
        self._accounts = list(accounts)
        self._chain_id = chain_id


class HttpWalletSurface:
    """Connection surface for a local HTTP wallet: available once the endpoint answers."""

    def __init__(
        self,
        url: Optional[str] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.url = url or settings.wallet_rpc_url
        self._transport = transport
        self._provider: Optional[HttpWalletProvider] = None

    async def open(self) -> None:
        if self._provider is None:
            self._provider = HttpWalletProvider(self.url, transport=self._transport)

    async def get_provider(self) -> Optional[EIP1193Provider]:
        if self._provider is None:
            return None
        try:
            await self._provider.request("eth_chainId")
        except httpx.HTTPError as exc:
            logger.debug("Wallet endpoint %s not ready: %s", self.url, exc)
            return None
        return self._provider

    async def close(self) -> None:
        self._provider = None
