"""
USD pricing for native assets and tokens.

Every lookup is cache-checked first, concurrent identical lookups share one
outbound request, and anything without a price mapping (or whose request
fails) is priced at zero rather than raising.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

import httpx

from ..cache import RequestCoalescer, TTLCache
from ..config import settings
from ..core.chains import ChainRegistry, get_chain_registry
from ..errors import PriceUnavailable
from ..providers.base import PriceProvider
from ..providers.coingecko import CoingeckoProvider

logger = logging.getLogger(__name__)


class PriceOracleClient:
    """Cached, coalesced USD prices keyed by chain."""

    def __init__(
        self,
        provider: Optional[PriceProvider] = None,
        *,
        registry: Optional[ChainRegistry] = None,
        cache: Optional[TTLCache] = None,
    ) -> None:
        self.provider = provider or CoingeckoProvider()
        self.registry = registry or get_chain_registry()
        self.cache = cache or TTLCache(default_ttl=settings.price_cache_ttl_seconds, max_size=settings.max_cache_size)
        self._coalescer = RequestCoalescer()

    # ------------------------------------------------------------------ mapping
    def native_coin_id(self, chain_id: int) -> Optional[str]:
        chain = self.registry.get(chain_id)
        return chain.coingecko_native_id if chain else None

    def platform(self, chain_id: int) -> Optional[str]:
        chain = self.registry.get(chain_id)
        return chain.coingecko_platform if chain else None

    # ------------------------------------------------------------------ plumbing
    async def _cached(self, key: str, loader) -> Any:
        cached = await self.cache.get(key)
        if cached is not None:
            return cached

        async def load_and_store() -> Any:
            value = await loader()
            await self.cache.set(key, value)
            return value

        return await self._coalescer.run(key, load_and_store)

    async def _guarded(self, what: str, call) -> Any:
        """Run a provider call, turning transport or HTTP failures into PriceUnavailable."""

        try:
            return await call()
        except (httpx.HTTPError, ValueError) as exc:
            raise PriceUnavailable(f"Price lookup failed for {what}", cause=exc) from exc

    # ------------------------------------------------------------------ public
    async def native_price(self, chain_id: int) -> float:
        coin_id = self.native_coin_id(chain_id)
        if not coin_id:
            logger.warning("No native price mapping for chain %s", chain_id)
            return 0.0

        async def load() -> float:
            prices = await self._guarded(coin_id, lambda: self.provider.get_simple_prices([coin_id]))
            return float(prices.get(coin_id, 0.0))

        try:
            return await self._cached(f"native_{coin_id}", load)
        except PriceUnavailable as exc:
            logger.warning("Native price unavailable for chain %s: %s", chain_id, exc.cause or exc)
            return 0.0

    async def token_prices(self, chain_id: int, addresses: Sequence[str]) -> Dict[str, float]:
        """USD price per lowercase address; unknown tokens are absent (price zero)."""

        platform = self.platform(chain_id)
        normalized = sorted({address.lower() for address in addresses if address})
        if not platform or not normalized:
            if not platform:
                logger.warning("No token price platform for chain %s", chain_id)
            return {}

        async def load() -> Dict[str, float]:
            return await self._guarded(
                f"{len(normalized)} tokens on chain {chain_id}",
                lambda: self.provider.get_token_prices(platform, normalized),
            )

        try:
            prices = await self._cached(f"tokens_{chain_id}_{'_'.join(normalized)}", load)
        except PriceUnavailable as exc:
            logger.warning("Token prices unavailable for chain %s: %s", chain_id, exc.cause or exc)
            return {}
        return dict(prices)

    async def many_native_prices(self, chain_ids: Iterable[int]) -> Dict[int, float]:
        chain_ids = list(dict.fromkeys(int(chain_id) for chain_id in chain_ids))
        coin_by_chain = {chain_id: self.native_coin_id(chain_id) for chain_id in chain_ids}
        coin_ids = sorted({coin for coin in coin_by_chain.values() if coin})
        if not coin_ids:
            return {chain_id: 0.0 for chain_id in chain_ids}

        async def load() -> Dict[str, float]:
            return await self._guarded(
                ",".join(coin_ids),
                lambda: self.provider.get_simple_prices(coin_ids),
            )

        try:
            by_coin = await self._cached(f"multi_native_{'_'.join(coin_ids)}", load)
        except PriceUnavailable as exc:
            logger.warning("Native prices unavailable: %s", exc.cause or exc)
            by_coin = {}

        return {
            chain_id: float(by_coin.get(coin, 0.0)) if coin else 0.0
            for chain_id, coin in coin_by_chain.items()
        }

    # ------------------------------------------------------------------ extras
    async def ping(self) -> Dict[str, Any]:
        return await self.provider.health_check()

    async def token_metadata_and_price(self, chain_id: int, address: str) -> Optional[Dict[str, Any]]:
        platform = self.platform(chain_id)
        if not platform:
            return None
        address = address.lower()

        try:
            return await self._cached(
                f"meta_{chain_id}_{address}",
                lambda: self._guarded(address, lambda: self.provider.get_token_info(platform, address)),
            )
        except PriceUnavailable as exc:
            logger.warning("Token metadata unavailable for %s on chain %s: %s", address, chain_id, exc.cause or exc)
            return None

    async def historical_prices(self, chain_id: int, address: str, days: int = 7) -> Optional[List[List[float]]]:
        platform = self.platform(chain_id)
        if not platform or not isinstance(self.provider, CoingeckoProvider):
            return None
        address = address.lower()

        try:
            return await self._cached(
                f"hist_{chain_id}_{address}_{days}",
                lambda: self._guarded(
                    address,
                    lambda: self.provider.get_contract_market_chart(platform, address, days),
                ),
            )
        except PriceUnavailable as exc:
            logger.warning("Historical prices unavailable for %s on chain %s: %s", address, chain_id, exc.cause or exc)
            return None

    async def total_value(self, entries: Iterable[Any]) -> float:
        """USD total for balance entries, pricing whatever has no ``usd_value`` yet."""

        entries = list(entries)
        chain_ids = {entry.chain_id for entry in entries}
        natives = await self.many_native_prices(chain_ids)

        tokens_by_chain: Dict[int, List[str]] = {}
        for entry in entries:
            if entry.usd_value is None and not entry.is_native:
                tokens_by_chain.setdefault(entry.chain_id, []).append(entry.address)
        token_prices = {chain_id: await self.token_prices(chain_id, addrs) for chain_id, addrs in tokens_by_chain.items()}

        total = 0.0
        for entry in entries:
            if entry.usd_value is not None:
                total += entry.usd_value
            elif entry.is_native:
                total += float(entry.formatted_balance) * natives.get(entry.chain_id, 0.0)
            else:
                price = token_prices.get(entry.chain_id, {}).get(entry.address.lower(), 0.0)
                total += float(entry.formatted_balance) * price
        return total

    async def clear_cache(self) -> None:
        await self.cache.clear()

    def cache_stats(self) -> Dict[str, Any]:
        stats = self.cache.stats()
        stats["in_flight"] = self._coalescer.pending
        return stats
