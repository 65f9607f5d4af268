"""
Wallet session manager.

Owns the single active wallet connection:
- Provider acquisition with bounded waits (connect) or silently (restore)
- Account, chain and disconnect events fanned out through WalletEventBus
- Chain switching with add-chain fallback from ChainRegistry metadata
- Signing and sending; no other component touches the provider handle
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional, Set

import httpx

from ...config import settings
from ...errors import (
    ConnectRejected,
    ConnectTimeout,
    RpcError,
    UnsupportedChain,
    WalletNotConnected,
)
from ...logging_config import bind_wallet_context
from ..chains import ChainRegistry, get_chain_registry
from .events import WalletEventBus, WalletListener
from .models import (
    AccountsChanged,
    ChainChanged,
    ConnectionState,
    Disconnected,
    WalletSession,
)
from .provider import (
    UNRECOGNIZED_CHAIN,
    USER_REJECTED,
    ConnectionSurface,
    EIP1193Provider,
    HttpWalletSurface,
)


def _parse_chain_id(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, int):
        return value
    text = str(value)
    return int(text, 16) if text.startswith("0x") else int(text)


class Signer:
    """Signing capability derived from the connected provider."""

    def __init__(self, manager: "WalletSessionManager", address: str):
        self._manager = manager
        self.address = address

    async def sign_message(self, message: str) -> str:
        return await self._manager.sign_message(message)

    async def send_transaction(self, tx: Dict[str, Any]) -> str:
        return await self._manager.send_transaction(tx)


class WalletSessionManager:
    """
    Manages the wallet connection lifecycle.

    States: disconnected -> connecting -> connected -> disconnected. While
    connected, account and chain changes update the session in place.
    """

    TRANSITIONS: Dict[ConnectionState, Set[ConnectionState]] = {
        ConnectionState.DISCONNECTED: {ConnectionState.CONNECTING, ConnectionState.CONNECTED},
        ConnectionState.CONNECTING: {ConnectionState.CONNECTED, ConnectionState.DISCONNECTED},
        ConnectionState.CONNECTED: {ConnectionState.CONNECTED, ConnectionState.DISCONNECTED},
    }

    def __init__(
        self,
        surface: Optional[ConnectionSurface] = None,
        *,
        registry: Optional[ChainRegistry] = None,
        events: Optional[WalletEventBus] = None,
        connect_timeout_s: Optional[float] = None,
        poll_interval_s: Optional[float] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.surface = surface or HttpWalletSurface()
        self.registry = registry or get_chain_registry()
        self.events = events or WalletEventBus()
        self.connect_timeout_s = connect_timeout_s or settings.connect_timeout_seconds
        self.poll_interval_s = poll_interval_s or settings.connect_poll_interval_seconds
        self.logger = logger or logging.getLogger(__name__)

        self._state = ConnectionState.DISCONNECTED
        self._session: Optional[WalletSession] = None
        self._provider_handlers: Dict[str, Callable[..., None]] = {}
        self._lock = asyncio.Lock()

    # ─────────────────────────────────────────────────────────────────────────
    # State
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def session(self) -> Optional[WalletSession]:
        return self._session

    @property
    def is_connected(self) -> bool:
        return self._state == ConnectionState.CONNECTED and self._session is not None

    @property
    def address(self) -> Optional[str]:
        return self._session.address if self._session else None

    @property
    def chain_id(self) -> Optional[int]:
        return self._session.chain_id if self._session else None

    @property
    def signer(self) -> Signer:
        session = self._require_session()
        return Signer(self, session.address)

    def subscribe(self, listener: WalletListener, events=None) -> Callable[[], None]:
        return self.events.subscribe(listener, events)

    def _set_state(self, to_state: ConnectionState) -> None:
        if to_state not in self.TRANSITIONS[self._state]:
            raise RuntimeError(f"Invalid wallet transition {self._state.value} -> {to_state.value}")
        if to_state != self._state:
            self.logger.info(f"Wallet {self._state.value} -> {to_state.value}")
        self._state = to_state
        if self._session is not None:
            self._session.state = to_state

    def _require_session(self) -> WalletSession:
        if not self.is_connected or not self._session or not self._session.address:
            raise WalletNotConnected("No wallet connected")
        return self._session

    # ─────────────────────────────────────────────────────────────────────────
    # Connect / restore
    # ─────────────────────────────────────────────────────────────────────────

    async def connect(self) -> WalletSession:
        """Interactive connect with a bounded wait for a provider and an account."""

        async with self._lock:
            if self.is_connected and self._session:
                return self._session

            self._set_state(ConnectionState.CONNECTING)
            loop = asyncio.get_running_loop()
            deadline = loop.time() + self.connect_timeout_s

            try:
                await self.surface.open()
                provider = await self._wait_for_provider(deadline)
                accounts = await self._wait_for_accounts(provider, deadline)
                chain_id = _parse_chain_id(await provider.request("eth_chainId"))
            except RpcError as exc:
                await self._abort_connect()
                if exc.code == USER_REJECTED:
                    raise ConnectRejected("Connection request rejected", cause=exc) from exc
                raise ConnectRejected(f"Provider refused connection: {exc.message}", cause=exc) from exc
            except (Exception, asyncio.CancelledError):
                # Malformed replies included: never leave the manager stuck in CONNECTING
                await self._abort_connect()
                raise

            return self._establish(provider, accounts, chain_id)

    async def _abort_connect(self) -> None:
        self._set_state(ConnectionState.DISCONNECTED)
        await self.surface.close()

    async def _wait_for_provider(self, deadline: float) -> EIP1193Provider:
        loop = asyncio.get_running_loop()
        while True:
            provider = await self.surface.get_provider()
            if provider is not None:
                return provider
            if loop.time() >= deadline:
                raise ConnectTimeout("No wallet provider became available")
            await asyncio.sleep(self.poll_interval_s)

    async def _wait_for_accounts(self, provider: EIP1193Provider, deadline: float) -> List[str]:
        loop = asyncio.get_running_loop()
        remaining = max(deadline - loop.time(), 0.0)
        try:
            accounts = await asyncio.wait_for(provider.request("eth_requestAccounts"), timeout=remaining)
        except asyncio.TimeoutError as exc:
            raise ConnectTimeout("Wallet did not authorize an account in time", cause=exc) from exc

        while not accounts:
            if loop.time() >= deadline:
                raise ConnectTimeout("Wallet returned no accounts")
            await asyncio.sleep(self.poll_interval_s)
            accounts = await provider.request("eth_accounts")
        return list(accounts)

    async def restore_session(self) -> Optional[WalletSession]:
        """Reattach to an already-authorized wallet without prompting; None if there is none."""

        async with self._lock:
            if self.is_connected and self._session:
                return self._session

            try:
                await self.surface.open()
                provider = await self.surface.get_provider()
                if provider is None:
                    return None
                accounts = await provider.request("eth_accounts") or []
                if not accounts:
                    return None
                chain_id = _parse_chain_id(await provider.request("eth_chainId"))
            except (RpcError, httpx.HTTPError) as exc:
                self.logger.warning(f"Session restore failed: {exc}")
                return None

            return self._establish(provider, list(accounts), chain_id)

    def _establish(self, provider: EIP1193Provider, accounts: List[str], chain_id: Optional[int]) -> WalletSession:
        self._session = WalletSession(provider=provider, accounts=accounts, chain_id=chain_id)
        self._set_state(ConnectionState.CONNECTED)
        self._attach_provider_listeners(provider)
        bind_wallet_context(self._session.address, chain_id)

        self.events.publish(AccountsChanged(accounts=tuple(accounts)))
        if chain_id is not None:
            self.events.publish(ChainChanged(chain_id=chain_id))
        return self._session

    # ─────────────────────────────────────────────────────────────────────────
    # Provider events
    # ─────────────────────────────────────────────────────────────────────────

    def _attach_provider_listeners(self, provider: EIP1193Provider) -> None:
        self._detach_provider_listeners()
        self._provider_handlers = {
            "accountsChanged": self._on_accounts_changed,
            "chainChanged": self._on_chain_changed,
            "disconnect": self._on_provider_disconnect,
        }
        for event, handler in self._provider_handlers.items():
            provider.on(event, handler)

    def _detach_provider_listeners(self) -> None:
        if self._session is not None:
            for event, handler in self._provider_handlers.items():
                self._session.provider.remove_listener(event, handler)
        self._provider_handlers = {}

    def _on_accounts_changed(self, accounts: List[str]) -> None:
        if not self.is_connected or self._session is None:
            return
        accounts = list(accounts or [])
        if not accounts:
            self._teardown("accounts revoked")
            return
        if accounts == self._session.accounts:
            return
        self._session.accounts = accounts
        self._set_state(ConnectionState.CONNECTED)
        bind_wallet_context(self._session.address, self._session.chain_id)
        self.events.publish(AccountsChanged(accounts=tuple(accounts)))

    def _on_chain_changed(self, chain_id: Any) -> None:
        if not self.is_connected or self._session is None:
            return
        new_id = _parse_chain_id(chain_id)
        if new_id is None or new_id == self._session.chain_id:
            return
        previous = self._session.chain_id
        self._session.chain_id = new_id
        self._set_state(ConnectionState.CONNECTED)
        bind_wallet_context(self._session.address, new_id)
        self.events.publish(ChainChanged(chain_id=new_id, previous_chain_id=previous))

    def _on_provider_disconnect(self, error: Any = None) -> None:
        reason = None
        if isinstance(error, dict):
            reason = error.get("message")
        elif error is not None:
            reason = str(error)
        self._teardown(reason or "provider disconnected")

    async def refresh(self) -> None:
        """Let polling providers report account or chain changes."""

        if self._session is None:
            return
        refresh = getattr(self._session.provider, "refresh", None)
        if refresh is not None:
            await refresh()

    # ─────────────────────────────────────────────────────────────────────────
    # Chain switching
    # ─────────────────────────────────────────────────────────────────────────

    async def switch_chain(self, target_chain_id: int) -> int:
        chain = self.registry.get(target_chain_id)
        if chain is None:
            raise UnsupportedChain(f"Chain {target_chain_id} is not supported", chain_id=target_chain_id)

        session = self._require_session()
        if session.chain_id == chain.chain_id:
            return chain.chain_id

        provider = session.provider
        switch_params = [{"chainId": chain.hex_id}]
        try:
            await provider.request("wallet_switchEthereumChain", switch_params)
        except RpcError as exc:
            if exc.code != UNRECOGNIZED_CHAIN:
                raise
            self.logger.info(f"Wallet does not know chain {chain.chain_id}; adding it")
            await provider.request("wallet_addEthereumChain", [chain.add_chain_params()])
            await provider.request("wallet_switchEthereumChain", switch_params)

        self._on_chain_changed(chain.chain_id)
        return chain.chain_id

    # ─────────────────────────────────────────────────────────────────────────
    # Signing
    # ─────────────────────────────────────────────────────────────────────────

    async def get_accounts(self) -> List[str]:
        session = self._require_session()
        accounts = await session.provider.request("eth_accounts") or []
        self._on_accounts_changed(list(accounts))
        return list(accounts)

    async def sign_message(self, message: str) -> str:
        session = self._require_session()
        payload = "0x" + message.encode("utf-8").hex()
        return await session.provider.request("personal_sign", [payload, session.address])

    async def send_transaction(self, tx: Dict[str, Any]) -> str:
        session = self._require_session()
        request = {"from": session.address, **tx}
        tx_hash = await session.provider.request("eth_sendTransaction", [request])
        self.logger.info(f"Submitted transaction {tx_hash} on chain {session.chain_id}")
        return tx_hash

    # ─────────────────────────────────────────────────────────────────────────
    # Teardown
    # ─────────────────────────────────────────────────────────────────────────

    def _teardown(self, reason: Optional[str]) -> None:
        was_active = self._state != ConnectionState.DISCONNECTED
        self._detach_provider_listeners()
        self._session = None
        self._state = ConnectionState.DISCONNECTED
        bind_wallet_context(None, None)
        if was_active:
            self.logger.info(f"Wallet disconnected ({reason or 'requested'})")
            self.events.publish(Disconnected(reason=reason))

    async def disconnect(self) -> None:
        """Drop the session; safe to call in any state."""

        self._teardown("requested")
        await self.surface.close()

    async def destroy(self) -> None:
        """Disconnect and drop every subscriber."""

        await self.disconnect()
        self.events.clear()


_manager: Optional[WalletSessionManager] = None


def get_wallet_manager() -> WalletSessionManager:
    global _manager
    if _manager is None:
        _manager = WalletSessionManager()
    return _manager
