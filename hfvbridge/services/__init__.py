"""Service layer helpers"""

from .discovery import BalanceDiscoveryEngine, DiscoveryMode, merge_balances
from .portfolio import PortfolioAggregator
from .preferences import PreferenceStore
from .prices import PriceOracleClient

__all__ = [
    "BalanceDiscoveryEngine",
    "DiscoveryMode",
    "merge_balances",
    "PortfolioAggregator",
    "PreferenceStore",
    "PriceOracleClient",
]
