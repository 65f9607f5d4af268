import httpx
import pytest

from conftest import OWNER, FakeRpc
from hfvbridge.core.wallet import AccountsChanged, ChainChanged, Disconnected, HttpWalletProvider, HttpWalletSurface, WalletEventBus


def test_duplicate_subscription_delivers_once():
    bus = WalletEventBus()
    received = []

    bus.subscribe(received.append)
    bus.subscribe(received.append)

    assert bus.publish(ChainChanged(chain_id=10)) == 1
    assert received == [ChainChanged(chain_id=10)]
    assert bus.listener_count == 1


def test_filtered_subscription_and_unsubscribe():
    bus = WalletEventBus()
    chains, everything = [], []

    unsubscribe = bus.subscribe(chains.append, events=[ChainChanged])
    bus.subscribe(everything.append)

    bus.publish(AccountsChanged(accounts=(OWNER,)))
    bus.publish(ChainChanged(chain_id=8453, previous_chain_id=1))
    unsubscribe()
    bus.publish(Disconnected(reason="requested"))

    assert chains == [ChainChanged(chain_id=8453, previous_chain_id=1)]
    assert len(everything) == 3


def test_failing_listener_does_not_block_others():
    bus = WalletEventBus()
    received = []

    def broken(event):
        raise RuntimeError("listener bug")

    bus.subscribe(broken)
    bus.subscribe(received.append)

    assert bus.publish(Disconnected(reason=None)) == 2
    assert received == [Disconnected(reason=None)]


@pytest.mark.asyncio
async def test_http_provider_refresh_emits_changes():
    state = {"accounts": [OWNER], "chain": "0x1"}
    rpc = FakeRpc({"eth_accounts": lambda params: state["accounts"], "eth_chainId": lambda params: state["chain"]})
    provider = HttpWalletProvider("http://wallet.test", transport=rpc.transport())
    seen = []
    provider.on("accountsChanged", lambda accounts: seen.append(("accounts", accounts)))
    provider.on("chainChanged", lambda chain: seen.append(("chain", chain)))

    await provider.refresh()
    state["chain"] = "0x2105"
    await provider.refresh()
    state["accounts"] = []
    await provider.refresh()

    assert seen == [("chain", "0x2105"), ("accounts", [])]


@pytest.mark.asyncio
async def test_http_provider_reports_disconnect_when_endpoint_fails():
    healthy = {"value": True}

    def handler(request):
        if not healthy["value"]:
            raise httpx.ConnectError("connection refused", request=request)
        return FakeRpc({"eth_accounts": [OWNER], "eth_chainId": "0x1"})(request)

    provider = HttpWalletProvider("http://wallet.test", transport=httpx.MockTransport(handler))
    disconnects = []
    provider.on("disconnect", disconnects.append)

    await provider.refresh()
    healthy["value"] = False
    await provider.refresh()
    await provider.refresh()

    assert len(disconnects) == 1
    assert disconnects[0]["code"] == 4900


@pytest.mark.asyncio
async def test_http_surface_waits_for_endpoint():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    surface = HttpWalletSurface("http://wallet.test", transport=httpx.MockTransport(handler))

    assert await surface.get_provider() is None
    await surface.open()
    assert await surface.get_provider() is None
