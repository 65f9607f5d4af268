import asyncio

import pytest

from conftest import OWNER, FakeSurface, FakeWalletProvider
from hfvbridge.core.wallet import (
    AccountsChanged,
    ChainChanged,
    ConnectionState,
    Disconnected,
    UNRECOGNIZED_CHAIN,
    USER_REJECTED,
    WalletEventBus,
    WalletSessionManager,
)
from hfvbridge.errors import ConnectRejected, ConnectTimeout, RpcError, UnsupportedChain, WalletNotConnected

OTHER = "0x3333333333333333333333333333333333333333"


def _manager(registry, surface, **kwargs):
    kwargs.setdefault("connect_timeout_s", 1.0)
    kwargs.setdefault("poll_interval_s", 0.01)
    return WalletSessionManager(surface, registry=registry, events=WalletEventBus(), **kwargs)


def _record(manager):
    events = []
    manager.subscribe(events.append)
    return events


@pytest.mark.asyncio
async def test_connect_establishes_session_and_publishes(registry, wallet_provider):
    manager = _manager(registry, FakeSurface(wallet_provider, ready_after=2))
    events = _record(manager)

    session = await manager.connect()

    assert manager.state == ConnectionState.CONNECTED
    assert manager.is_connected
    assert session.address == OWNER
    assert manager.chain_id == 1
    assert events == [AccountsChanged(accounts=(OWNER,)), ChainChanged(chain_id=1)]
    assert set(wallet_provider.listeners) == {"accountsChanged", "chainChanged", "disconnect"}


@pytest.mark.asyncio
async def test_connect_is_idempotent(registry, wallet_provider):
    manager = _manager(registry, FakeSurface(wallet_provider))

    first = await manager.connect()
    second = await manager.connect()

    assert first is second
    assert wallet_provider.methods().count("eth_requestAccounts") == 1


@pytest.mark.asyncio
async def test_connect_times_out_without_provider(registry):
    surface = FakeSurface(provider=None)
    manager = _manager(registry, surface, connect_timeout_s=0.05)

    with pytest.raises(ConnectTimeout):
        await manager.connect()

    assert manager.state == ConnectionState.DISCONNECTED
    assert surface.polls > 1
    assert surface.closed == 1


@pytest.mark.asyncio
async def test_connect_times_out_waiting_for_authorization(registry):
    class SlowProvider(FakeWalletProvider):
        async def request(self, method, params=None):
            if method == "eth_requestAccounts":
                await asyncio.sleep(10)
            return await super().request(method, params)

    manager = _manager(registry, FakeSurface(SlowProvider()), connect_timeout_s=0.05)

    with pytest.raises(ConnectTimeout):
        await manager.connect()
    assert manager.state == ConnectionState.DISCONNECTED


@pytest.mark.asyncio
async def test_user_rejection(registry):
    provider = FakeWalletProvider(responses={"eth_requestAccounts": RpcError("User rejected", code=USER_REJECTED)})
    manager = _manager(registry, FakeSurface(provider))
    events = _record(manager)

    with pytest.raises(ConnectRejected) as exc_info:
        await manager.connect()

    assert exc_info.value.cause.code == USER_REJECTED
    assert manager.state == ConnectionState.DISCONNECTED
    assert events == []


@pytest.mark.asyncio
async def test_malformed_chain_id_does_not_wedge_connect(registry):
    provider = FakeWalletProvider(chain_id="garbage")
    surface = FakeSurface(provider)
    manager = _manager(registry, surface)

    with pytest.raises(ValueError):
        await manager.connect()

    assert manager.state == ConnectionState.DISCONNECTED
    assert surface.closed == 1

    provider.chain_id = "0x1"
    session = await manager.connect()

    assert manager.state == ConnectionState.CONNECTED
    assert session.chain_id == 1


@pytest.mark.asyncio
async def test_restore_session_without_authorized_account(registry):
    provider = FakeWalletProvider(accounts=[])
    manager = _manager(registry, FakeSurface(provider))

    assert await manager.restore_session() is None
    assert manager.state == ConnectionState.DISCONNECTED
    assert "eth_requestAccounts" not in provider.methods()


@pytest.mark.asyncio
async def test_restore_session_reattaches(registry, wallet_provider):
    wallet_provider.chain_id = "0x2105"
    manager = _manager(registry, FakeSurface(wallet_provider))

    session = await manager.restore_session()

    assert session is not None
    assert manager.chain_id == 8453
    assert "eth_requestAccounts" not in wallet_provider.methods()


@pytest.mark.asyncio
async def test_restore_session_absorbs_provider_errors(registry):
    provider = FakeWalletProvider(responses={"eth_accounts": RpcError("locked", code=4100)})
    manager = _manager(registry, FakeSurface(provider))

    assert await manager.restore_session() is None


@pytest.mark.asyncio
async def test_switch_chain_adds_unknown_chain_then_retries(registry):
    attempts = []

    def switch(params):
        attempts.append(params[0]["chainId"])
        if len(attempts) == 1:
            return RpcError("Unrecognized chain", code=UNRECOGNIZED_CHAIN)
        return None

    provider = FakeWalletProvider(responses={"wallet_switchEthereumChain": switch, "wallet_addEthereumChain": None})
    manager = _manager(registry, FakeSurface(provider))
    await manager.connect()
    events = _record(manager)

    assert await manager.switch_chain(8453) == 8453

    assert attempts == ["0x2105", "0x2105"]
    add_params = [params for method, params in provider.calls if method == "wallet_addEthereumChain"][0][0]
    assert add_params["chainName"] == "Base"
    assert add_params["nativeCurrency"]["symbol"] == "ETH"
    assert add_params["rpcUrls"] == ["https://rpc.test/8453"]
    assert manager.chain_id == 8453
    assert events == [ChainChanged(chain_id=8453, previous_chain_id=1)]


@pytest.mark.asyncio
async def test_switch_to_unsupported_chain_never_reaches_provider(registry, wallet_provider):
    manager = _manager(registry, FakeSurface(wallet_provider))
    await manager.connect()
    before = list(wallet_provider.calls)

    with pytest.raises(UnsupportedChain):
        await manager.switch_chain(999999)

    assert wallet_provider.calls == before
    assert manager.chain_id == 1


@pytest.mark.asyncio
async def test_switch_chain_other_errors_propagate(registry):
    provider = FakeWalletProvider(responses={"wallet_switchEthereumChain": RpcError("rejected", code=USER_REJECTED)})
    manager = _manager(registry, FakeSurface(provider))
    await manager.connect()

    with pytest.raises(RpcError):
        await manager.switch_chain(8453)
    assert "wallet_addEthereumChain" not in provider.methods()


@pytest.mark.asyncio
async def test_switch_to_current_chain_is_a_no_op(registry, wallet_provider):
    manager = _manager(registry, FakeSurface(wallet_provider))
    await manager.connect()

    assert await manager.switch_chain(1) == 1
    assert "wallet_switchEthereumChain" not in wallet_provider.methods()


@pytest.mark.asyncio
async def test_provider_events_update_session(registry, wallet_provider):
    manager = _manager(registry, FakeSurface(wallet_provider))
    await manager.connect()
    events = _record(manager)

    wallet_provider.emit("chainChanged", "0x89")
    wallet_provider.emit("chainChanged", "0x89")
    wallet_provider.emit("accountsChanged", [OTHER])

    assert manager.chain_id == 137
    assert manager.address == OTHER
    assert events == [ChainChanged(chain_id=137, previous_chain_id=1), AccountsChanged(accounts=(OTHER,))]


@pytest.mark.asyncio
async def test_revoked_accounts_disconnect_once(registry, wallet_provider):
    manager = _manager(registry, FakeSurface(wallet_provider))
    await manager.connect()
    events = _record(manager)

    wallet_provider.emit("accountsChanged", [])
    await manager.disconnect()

    assert manager.state == ConnectionState.DISCONNECTED
    assert [type(event) for event in events] == [Disconnected]
    assert wallet_provider.listeners == {"accountsChanged": [], "chainChanged": [], "disconnect": []}


@pytest.mark.asyncio
async def test_disconnect_is_safe_in_any_state(registry):
    manager = _manager(registry, FakeSurface(None))
    events = _record(manager)

    await manager.disconnect()
    await manager.disconnect()

    assert events == []


@pytest.mark.asyncio
async def test_signing_requires_session(registry, wallet_provider):
    manager = _manager(registry, FakeSurface(wallet_provider))

    with pytest.raises(WalletNotConnected):
        await manager.send_transaction({"to": OTHER})
    with pytest.raises(WalletNotConnected):
        manager.signer

    await manager.connect()
    tx_hash = await manager.signer.send_transaction({"to": OTHER, "value": "0x1"})
    signature = await manager.sign_message("hello")

    assert tx_hash.startswith("0x")
    assert wallet_provider.sent_transactions() == [{"from": OWNER, "to": OTHER, "value": "0x1"}]
    assert signature.startswith("0x")
    sign_call = [params for method, params in wallet_provider.calls if method == "personal_sign"][0]
    assert sign_call == ["0x" + b"hello".hex(), OWNER]


@pytest.mark.asyncio
async def test_destroy_drops_subscribers(registry, wallet_provider):
    manager = _manager(registry, FakeSurface(wallet_provider))
    events = _record(manager)
    await manager.connect()

    await manager.destroy()

    assert manager.events.listener_count == 0
    assert isinstance(events[-1], Disconnected)


@pytest.mark.asyncio
async def test_get_accounts_refreshes_the_active_account(registry, wallet_provider):
    manager = _manager(registry, FakeSurface(wallet_provider))
    with pytest.raises(WalletNotConnected):
        await manager.get_accounts()

    await manager.connect()
    events = _record(manager)

    assert await manager.get_accounts() == [OWNER]
    assert events == []

    wallet_provider.accounts = [OTHER, OWNER]
    assert await manager.get_accounts() == [OTHER, OWNER]

    assert manager.address == OTHER
    assert events == [AccountsChanged(accounts=(OTHER, OWNER))]
