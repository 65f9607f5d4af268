import json

import httpx
import pytest

from hfvbridge.providers.hosted_bridge import HostedBridgeProvider


def _provider(handler):
    return HostedBridgeProvider(base_url="https://hosted.test/api", env="testnet", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_quote_posts_payload():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["env"] = request.headers["x-hfv-env"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"estimatedOutputAmount": "12.4", "estimatedGasUsd": 1.2, "quoteId": "q-1"})

    data = await _provider(handler).quote(
        from_chain="ethereum",
        to_chain="base",
        token="USDC",
        amount="12.5",
        recipient="0x" + "11" * 20,
    )

    assert data["quoteId"] == "q-1"
    assert seen["path"] == "/api/bridge/quote"
    assert seen["env"] == "testnet"
    assert seen["body"] == {
        "fromChain": "ethereum",
        "toChain": "base",
        "token": "USDC",
        "amount": "12.5",
        "recipient": "0x" + "11" * 20,
    }


@pytest.mark.asyncio
async def test_quote_without_output_amount_is_rejected():
    def handler(request):
        return httpx.Response(200, json={"quoteId": "q-1"})

    with pytest.raises(ValueError):
        await _provider(handler).quote(from_chain="ethereum", to_chain="base", token="USDC", amount="1", recipient="0x" + "11" * 20)


@pytest.mark.asyncio
async def test_execute_requires_tracking_reference():
    def handler(request):
        body = json.loads(request.content)
        if body["quoteId"] == "q-ok":
            return httpx.Response(200, json={"trackingId": "trk-9"})
        return httpx.Response(200, json={"status": "queued"})

    provider = _provider(handler)
    kwargs = dict(from_chain="ethereum", to_chain="base", token="USDC", amount="1", recipient="0x" + "11" * 20)

    assert (await provider.bridge(quote_id="q-ok", **kwargs))["trackingId"] == "trk-9"
    with pytest.raises(ValueError):
        await provider.bridge(quote_id="q-missing", **kwargs)


@pytest.mark.asyncio
async def test_http_errors_propagate():
    def handler(request):
        return httpx.Response(502, json={"error": "upstream"})

    with pytest.raises(httpx.HTTPStatusError):
        await _provider(handler).quote(from_chain="ethereum", to_chain="base", token="USDC", amount="1", recipient="0x" + "11" * 20)
