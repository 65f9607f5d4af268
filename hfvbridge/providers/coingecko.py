import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx

from ..config import settings
from .base import PriceProvider

logger = logging.getLogger(__name__)


class CoingeckoProvider(PriceProvider):
    """Coingecko API provider for USD prices (free / demo tier)"""

    name = "coingecko"

    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_s: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = settings.coingecko_api_key if api_key is None else api_key
        self.base_url = (base_url or settings.coingecko_base_url).rstrip("/")
        self.timeout_s = timeout_s or settings.request_timeout_seconds
        self._transport = transport

    def _build_headers(self) -> Dict[str, str]:
        headers: Dict[str, str] = {"Accept": "application/json"}
        if self.api_key:
            # demo tier uses this header, not the pro one
            headers["x-cg-demo-api-key"] = self.api_key
        return headers

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Optional[Any]:
        """GET a Coingecko path; returns None on 404 and retries once on 429."""

        async with httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport) as client:
            for attempt in range(2):
                try:
                    resp = await client.get(
                        f"{self.base_url}{path}",
                        headers=self._build_headers(),
                        params=params,
                    )
                    if resp.status_code == 404:
                        return None
                    resp.raise_for_status()
                    return resp.json()
                except httpx.HTTPStatusError as exc:
                    if exc.response.status_code == 429 and attempt == 0:
                        await asyncio.sleep(2)
                        continue
                    raise
        return None

    async def ready(self) -> bool:
        return settings.enable_coingecko  # API key is optional for basic tier

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {"status": "unavailable", "reason": "Provider disabled"}

        try:
            async with httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport) as client:
                response = await client.get(f"{self.base_url}/ping", headers=self._build_headers())
                response.raise_for_status()
                payload = response.json()
            return {
                "status": "healthy",
                "message": payload.get("gecko_says") or "(v3 ping ok)",
                "api_key_loaded": bool(self.api_key),
            }
        except (httpx.HTTPError, ValueError) as e:
            return {"status": "error", "reason": str(e), "api_key_loaded": bool(self.api_key)}

    async def get_simple_prices(self, coin_ids: List[str]) -> Dict[str, float]:
        if not coin_ids:
            return {}

        data = await self._get(
            "/simple/price",
            {"ids": ",".join(coin_ids), "vs_currencies": "usd", "include_last_updated_at": "true"},
        )

        prices: Dict[str, float] = {}
        for coin_id, price_data in (data or {}).items():
            if isinstance(price_data, dict) and "usd" in price_data:
                prices[coin_id] = float(price_data["usd"] or 0)
        return prices

    async def get_token_prices(self, platform: str, token_addresses: List[str]) -> Dict[str, float]:
        """Get current prices for multiple tokens by contract address"""
        if not token_addresses:
            return {}

        data = await self._get(
            f"/simple/token_price/{platform}",
            {
                "contract_addresses": ",".join(token_addresses),
                "vs_currencies": "usd",
                "include_last_updated_at": "true",
            },
        )

        prices: Dict[str, float] = {}
        for address, price_data in (data or {}).items():
            if isinstance(price_data, dict):
                prices[address.lower()] = float(price_data.get("usd") or 0)
        return prices

    async def get_token_info(self, platform: str, token_address: str) -> Optional[Dict[str, Any]]:
        """Token metadata plus current market data"""

        data = await self._get(
            f"/coins/{platform}/contract/{token_address}",
            {
                "localization": "false",
                "tickers": "false",
                "market_data": "true",
                "community_data": "false",
                "developer_data": "false",
                "sparkline": "false",
            },
        )
        if not data:
            return None

        market = data.get("market_data") or {}
        return {
            "name": data.get("name"),
            "symbol": str(data.get("symbol") or "").upper(),
            "decimals": ((data.get("detail_platforms") or {}).get(platform) or {}).get("decimal_place") or 18,
            "price": float((market.get("current_price") or {}).get("usd") or 0),
            "price_change_24h": float(market.get("price_change_percentage_24h") or 0),
            "logo": (data.get("image") or {}).get("small"),
        }

    async def get_contract_market_chart(self, platform: str, token_address: str, days: int = 7) -> List[List[float]]:
        data = await self._get(
            f"/coins/{platform}/contract/{token_address}/market_chart",
            {"vs_currency": "usd", "days": days},
        )
        return (data or {}).get("prices") or []
