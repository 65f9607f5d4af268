from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class Provider(ABC):
    """Base provider interface"""

    name: str
    timeout_s: float = 10

    @abstractmethod
    async def ready(self) -> bool:
        """Check if provider is ready to serve requests"""
        pass

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        """Return provider health status"""
        pass


class IndexerProvider(Provider):
    """Provider for indexed wallet holdings on one chain"""

    @abstractmethod
    async def get_token_balances(self, address: str, chain_id: int) -> List[Dict[str, Any]]:
        """Return the indexed holdings for an address, native asset included.

        Each item carries ``address``, ``symbol``, ``name``, ``decimals``,
        ``balance`` (raw integer string) and optionally ``price_usd``.
        """
        pass


class PriceProvider(Provider):
    """Provider for USD price data"""

    @abstractmethod
    async def get_simple_prices(self, coin_ids: List[str]) -> Dict[str, float]:
        """USD price per coin id"""
        pass

    @abstractmethod
    async def get_token_prices(self, platform: str, token_addresses: List[str]) -> Dict[str, float]:
        """USD price per lowercase contract address on one platform"""
        pass

    @abstractmethod
    async def get_token_info(self, platform: str, token_address: str) -> Optional[Dict[str, Any]]:
        """Token metadata (symbol, name, decimals, price) or None when unknown"""
        pass
