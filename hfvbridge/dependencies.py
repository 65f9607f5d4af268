"""Process-wide component wiring for the API and CLI entry points."""

from __future__ import annotations

from typing import Optional

from .config import settings
from .core.bridge.orchestrator import BridgeOrchestrator
from .core.chains import ChainRegistry, get_chain_registry
from .core.wallet import WalletSessionManager, get_wallet_manager
from .providers.covalent import CovalentProvider
from .providers.hosted_bridge import HostedBridgeProvider
from .providers.rpc import ChainRpcPool
from .providers.token_list import TokenListProvider
from .services.discovery import BalanceDiscoveryEngine
from .services.portfolio import PortfolioAggregator
from .services.preferences import PreferenceStore
from .services.prices import PriceOracleClient


class Components:
    """Holds one instance of every long-lived component."""

    def __init__(
        self,
        *,
        registry: Optional[ChainRegistry] = None,
        wallet: Optional[WalletSessionManager] = None,
        prices: Optional[PriceOracleClient] = None,
        discovery: Optional[BalanceDiscoveryEngine] = None,
        hosted: Optional[HostedBridgeProvider] = None,
        preferences: Optional[PreferenceStore] = None,
    ) -> None:
        self.registry = registry or get_chain_registry()
        self.rpc_pool = ChainRpcPool(self.registry)
        self.wallet = wallet or get_wallet_manager()
        self.prices = prices or PriceOracleClient(registry=self.registry)
        self.discovery = discovery or BalanceDiscoveryEngine(
            self.registry,
            rpc_pool=self.rpc_pool,
            token_lists=TokenListProvider(self.registry),
            indexer=CovalentProvider(registry=self.registry) if settings.enable_indexer else None,
        )
        self.portfolio = PortfolioAggregator(self.discovery, self.prices, registry=self.registry)
        self.bridge = BridgeOrchestrator(
            self.wallet,
            registry=self.registry,
            prices=self.prices,
            rpc_pool=self.rpc_pool,
            hosted=hosted or HostedBridgeProvider(),
        )
        self.preferences = preferences or PreferenceStore()


_components: Optional[Components] = None


def get_components() -> Components:
    global _components
    if _components is None:
        _components = Components()
    return _components


def set_components(components: Optional[Components]) -> None:
    """Replace the process-wide components (tests, embedding)."""
    global _components
    if _components is not None and _components is not components:
        _components.bridge.close()
    _components = components


def get_registry() -> ChainRegistry:
    return get_components().registry


def get_wallet() -> WalletSessionManager:
    return get_components().wallet


def get_prices() -> PriceOracleClient:
    return get_components().prices


def get_portfolio_aggregator() -> PortfolioAggregator:
    return get_components().portfolio


def get_bridge() -> BridgeOrchestrator:
    return get_components().bridge


def get_preferences() -> PreferenceStore:
    return get_components().preferences
