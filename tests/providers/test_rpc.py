import httpx
import pytest

from conftest import FakeRpc, make_chain
from hfvbridge.config import settings
from hfvbridge.core.chains import ChainRegistry
from hfvbridge.errors import RpcError
from hfvbridge.providers.rpc import ChainRpcPool, JsonRpcClient


@pytest.mark.asyncio
async def test_quantities_are_parsed_from_hex():
    rpc = FakeRpc({"eth_getBalance": "0xde0b6b3a7640000", "eth_blockNumber": "0x10"})
    client = JsonRpcClient("https://rpc.test/1", chain_id=1, transport=rpc.transport())

    assert await client.get_balance("0x" + "11" * 20) == 10**18
    assert await client.block_number() == 16
    assert rpc.calls[0][2] == ["0x" + "11" * 20, "latest"]


@pytest.mark.asyncio
async def test_error_object_raises_rpc_error_with_code():
    rpc = FakeRpc()
    client = JsonRpcClient("https://rpc.test/1", chain_id=1, transport=rpc.transport())

    with pytest.raises(RpcError) as exc_info:
        await client.call("eth_unknown")

    assert exc_info.value.code == -32601
    assert exc_info.value.chain_id == 1


@pytest.mark.asyncio
async def test_http_failure_propagates():
    def handler(request):
        return httpx.Response(503, text="unavailable")

    client = JsonRpcClient("https://rpc.test/1", transport=httpx.MockTransport(handler))

    with pytest.raises(httpx.HTTPStatusError):
        await client.gas_price()


def test_pool_reuses_clients_and_skips_chains_without_rpc():
    registry = ChainRegistry([make_chain(1), make_chain(9745, rpc_url=None)])
    pool = ChainRpcPool(registry)

    assert pool.get(1) is pool.get(1)
    assert pool.get(9745) is None


def test_pool_substitutes_alchemy_key(monkeypatch):
    registry = ChainRegistry([make_chain(1, rpc_url="https://eth-mainnet.g.alchemy.com/v2/{alchemy_key}")])

    monkeypatch.setattr(settings, "alchemy_api_key", "")
    assert ChainRpcPool(registry).get(1) is None

    monkeypatch.setattr(settings, "alchemy_api_key", "secret")
    client = ChainRpcPool(registry).get(1)
    assert client.url == "https://eth-mainnet.g.alchemy.com/v2/secret"
