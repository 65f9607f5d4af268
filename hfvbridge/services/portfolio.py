"""Portfolio sweep across every registered chain."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Iterable, List, Optional

from ..config import settings
from ..core.chains import ChainRegistry
from ..core.portfolio import BalanceEntry, Portfolio, PortfolioChain
from .discovery import BalanceDiscoveryEngine, DiscoveryMode
from .prices import PriceOracleClient

logger = logging.getLogger(__name__)


class PortfolioAggregator:
    """Runs discovery on all chains concurrently and values the result in USD.

    A chain whose discovery fails contributes an empty entry list and its
    error message; the other chains are unaffected.
    """

    def __init__(
        self,
        discovery: BalanceDiscoveryEngine,
        prices: PriceOracleClient,
        *,
        registry: Optional[ChainRegistry] = None,
        dust_threshold_usd: Optional[float] = None,
    ) -> None:
        self.discovery = discovery
        self.prices = prices
        self.registry = registry or discovery.registry
        self.dust_threshold_usd = (
            settings.dust_threshold_usd if dust_threshold_usd is None else dust_threshold_usd
        )

    async def get_portfolio(
        self,
        owner: str,
        chain_ids: Optional[Iterable[int]] = None,
        *,
        mode: Optional[DiscoveryMode] = None,
    ) -> Portfolio:
        portfolio = Portfolio(owner=owner, dust_threshold_usd=self.dust_threshold_usd)
        if not owner:
            return portfolio

        targets = list(chain_ids) if chain_ids is not None else self.registry.chain_ids()
        if not targets:
            return portfolio

        results = await asyncio.gather(
            *(self.discovery.discover(chain_id, owner, mode) for chain_id in targets),
            return_exceptions=True,
        )

        discovered: Dict[int, List[BalanceEntry]] = {}
        for chain_id, result in zip(targets, results):
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, BaseException):
                logger.warning("Discovery failed for chain %s: %s", chain_id, result)
                portfolio.chains[chain_id] = PortfolioChain(chain_id=chain_id, error=str(result) or type(result).__name__)
                continue
            discovered[chain_id] = result

        valued = await self._value(discovered)
        for chain_id, entries in valued.items():
            portfolio.chains[chain_id] = PortfolioChain(chain_id=chain_id, entries=tuple(entries))

        # keep the requested chain order
        portfolio.chains = {chain_id: portfolio.chains[chain_id] for chain_id in targets if chain_id in portfolio.chains}

        if portfolio.errors:
            logger.info(
                "Portfolio for %s: %d chains ok, %d failed",
                owner,
                len(targets) - len(portfolio.errors),
                len(portfolio.errors),
            )
        return portfolio

    async def _value(self, discovered: Dict[int, List[BalanceEntry]]) -> Dict[int, List[BalanceEntry]]:
        """Attach USD values to entries the indexer did not already price."""

        chains_with_native = [
            chain_id
            for chain_id, entries in discovered.items()
            if any(entry.is_native and entry.usd_value is None for entry in entries)
        ]
        native_prices = await self.prices.many_native_prices(chains_with_native) if chains_with_native else {}

        async def token_prices_for(chain_id: int, entries: List[BalanceEntry]) -> Dict[str, float]:
            addresses = [e.address for e in entries if not e.is_native and e.usd_value is None]
            if not addresses:
                return {}
            return await self.prices.token_prices(chain_id, addresses)

        chain_order = list(discovered)
        token_price_maps = await asyncio.gather(
            *(token_prices_for(chain_id, discovered[chain_id]) for chain_id in chain_order)
        )

        valued: Dict[int, List[BalanceEntry]] = {}
        for chain_id, token_prices in zip(chain_order, token_price_maps):
            priced: List[BalanceEntry] = []
            for entry in discovered[chain_id]:
                if entry.usd_value is not None:
                    priced.append(entry)
                elif entry.is_native:
                    priced.append(entry.with_price(native_prices.get(chain_id, 0.0)))
                else:
                    priced.append(entry.with_price(token_prices.get(entry.key, 0.0)))
            valued[chain_id] = priced
        return valued
