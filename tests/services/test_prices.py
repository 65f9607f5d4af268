import asyncio

import httpx
import pytest

from conftest import FakePriceProvider, USDC_ETH
from hfvbridge.core.chains import NATIVE_PLACEHOLDER
from hfvbridge.core.portfolio import BalanceEntry, BalanceSource
from hfvbridge.providers.coingecko import CoingeckoProvider
from hfvbridge.services.prices import PriceOracleClient


def _client(registry, provider: FakePriceProvider) -> PriceOracleClient:
    return PriceOracleClient(provider, registry=registry)


@pytest.mark.asyncio
async def test_native_price_for_mapped_chain(registry):
    provider = FakePriceProvider(coins={"ethereum": 2500.0})

    assert await _client(registry, provider).native_price(1) == 2500.0
    assert provider.calls == [("simple", ("ethereum",))]


@pytest.mark.asyncio
async def test_unmapped_chain_is_zero_without_a_request(registry):
    provider = FakePriceProvider(coins={"ethereum": 2500.0})
    client = _client(registry, provider)

    assert await client.native_price(9745) == 0.0
    assert await client.token_prices(9745, [USDC_ETH]) == {}
    assert provider.calls == []


@pytest.mark.asyncio
async def test_concurrent_lookups_share_one_request(registry):
    provider = FakePriceProvider(coins={"ethereum": 2500.0})
    provider.delay = 0.01
    client = _client(registry, provider)

    prices = await asyncio.gather(*(client.native_price(1) for _ in range(4)))

    assert prices == [2500.0] * 4
    assert len(provider.calls) == 1


@pytest.mark.asyncio
async def test_cached_price_is_reused_across_chains_with_the_same_coin(registry):
    provider = FakePriceProvider(coins={"ethereum": 2500.0})
    client = _client(registry, provider)

    await client.native_price(1)
    assert await client.native_price(8453) == 2500.0
    assert len(provider.calls) == 1


@pytest.mark.asyncio
async def test_failure_is_zero_and_not_cached(registry):
    provider = FakePriceProvider(coins={"ethereum": 2500.0})
    provider.fail = True
    client = _client(registry, provider)

    assert await client.native_price(1) == 0.0

    provider.fail = False
    assert await client.native_price(1) == 2500.0
    assert len(provider.calls) == 2


@pytest.mark.asyncio
async def test_token_prices_keyed_by_lowercase_address(registry):
    provider = FakePriceProvider(tokens={USDC_ETH: 1.0})
    client = _client(registry, provider)

    prices = await client.token_prices(1, [USDC_ETH.upper().replace("0X", "0x"), "0x" + "ee" * 20])

    assert prices == {USDC_ETH: 1.0}
    platform, addresses = provider.calls[0][1]
    assert platform == "ethereum"
    assert all(address == address.lower() for address in addresses)


@pytest.mark.asyncio
async def test_token_price_failure_is_empty(registry):
    provider = FakePriceProvider(tokens={USDC_ETH: 1.0})
    provider.fail = True

    assert await _client(registry, provider).token_prices(1, [USDC_ETH]) == {}


@pytest.mark.asyncio
async def test_many_native_prices_batches_distinct_coins(registry):
    provider = FakePriceProvider(coins={"ethereum": 2500.0, "matic-network": 0.5})
    client = _client(registry, provider)

    prices = await client.many_native_prices([1, 8453, 137, 9745, 1])

    assert prices == {1: 2500.0, 8453: 2500.0, 137: 0.5, 9745: 0.0}
    assert provider.calls == [("simple", ("ethereum", "matic-network"))]


@pytest.mark.asyncio
async def test_token_metadata_and_price(registry):
    provider = FakePriceProvider(tokens={USDC_ETH: 1.0})
    client = _client(registry, provider)

    info = await client.token_metadata_and_price(1, USDC_ETH)

    assert info["price_usd"] == 1.0
    assert await client.token_metadata_and_price(1, "0x" + "ee" * 20) is None
    assert await client.token_metadata_and_price(9745, USDC_ETH) is None


@pytest.mark.asyncio
async def test_total_value_prices_unvalued_entries(registry):
    provider = FakePriceProvider(coins={"ethereum": 2000.0}, tokens={USDC_ETH: 1.0})
    client = _client(registry, provider)
    entries = [
        BalanceEntry(chain_id=1, address=NATIVE_PLACEHOLDER, symbol="ETH", decimals=18,
                     balance=10**18, source=BalanceSource.NATIVE),
        BalanceEntry(chain_id=1, address=USDC_ETH, symbol="USDC", decimals=6,
                     balance=12_500_000, source=BalanceSource.MULTICALL),
        BalanceEntry(chain_id=8453, address="0x" + "cc" * 20, symbol="PRE", decimals=18,
                     balance=1, source=BalanceSource.INDEXER, usd_value=3.0),
    ]

    assert await client.total_value(entries) == pytest.approx(2015.5)


@pytest.mark.asyncio
async def test_cache_stats_and_clear(registry):
    provider = FakePriceProvider(coins={"ethereum": 2500.0})
    client = _client(registry, provider)

    await client.native_price(1)
    stats = client.cache_stats()
    assert stats["size"] == 1
    assert stats["in_flight"] == 0

    await client.clear_cache()
    assert client.cache_stats()["size"] == 0


@pytest.mark.asyncio
async def test_historical_prices_from_coingecko(registry):
    requests = []

    def handler(request):
        requests.append(request.url.path)
        return httpx.Response(200, json={"prices": [[1, 1.0], [2, 1.01]]})

    provider = CoingeckoProvider(api_key="", base_url="https://cg.test/api/v3", transport=httpx.MockTransport(handler))
    client = PriceOracleClient(provider, registry=registry)

    first = await client.historical_prices(1, USDC_ETH.upper().replace("0X", "0x"), days=7)
    second = await client.historical_prices(1, USDC_ETH, days=7)

    assert first == second == [[1, 1.0], [2, 1.01]]
    assert requests == [f"/api/v3/coins/ethereum/contract/{USDC_ETH}/market_chart"]
    assert await client.historical_prices(9745, USDC_ETH) is None


@pytest.mark.asyncio
async def test_historical_prices_failure_is_none(registry):
    def handler(request):
        return httpx.Response(500, json={"error": "boom"})

    provider = CoingeckoProvider(api_key="", base_url="https://cg.test/api/v3", transport=httpx.MockTransport(handler))

    assert await PriceOracleClient(provider, registry=registry).historical_prices(1, USDC_ETH) is None


@pytest.mark.asyncio
async def test_historical_prices_need_a_chart_source(registry):
    client = _client(registry, FakePriceProvider(tokens={USDC_ETH: 1.0}))

    assert await client.historical_prices(1, USDC_ETH) is None
