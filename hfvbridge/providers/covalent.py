import logging
from typing import Any, Dict, List, Optional

import httpx

from ..config import settings
from ..core.chains import NATIVE_PLACEHOLDER, ChainRegistry, get_chain_registry
from ..errors import BridgeCoreError
from .base import IndexerProvider

logger = logging.getLogger(__name__)

# Covalent reports the gas token under this pseudo-address
_NATIVE_ALIASES = {
    "0xeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeee",
    NATIVE_PLACEHOLDER,
}


class CovalentError(BridgeCoreError):
    """Raised when the Covalent API rejects a call or returns malformed data."""


class CovalentProvider(IndexerProvider):
    """Wallet balances from the Covalent indexer"""

    name = "covalent"

    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_s: Optional[float] = None,
        registry: Optional[ChainRegistry] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = (settings.covalent_api_key if api_key is None else api_key).strip()
        self.base_url = (base_url or settings.covalent_base_url).rstrip("/")
        self.timeout_s = timeout_s or settings.request_timeout_seconds
        self._registry = registry or get_chain_registry()
        self._transport = transport

    async def ready(self) -> bool:
        return settings.enable_indexer and bool(self.api_key)

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {"status": "unavailable", "reason": "Missing API key or provider disabled"}
        return {"status": "configured"}

    async def _request(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        query: Dict[str, Any] = {"key": self.api_key}
        if params:
            query.update(params)

        async with httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport) as client:
            resp = await client.get(
                f"{self.base_url}/{path.lstrip('/')}",
                params=query,
                headers={"accept": "application/json"},
            )

        try:
            payload = resp.json()
        except ValueError as exc:
            raise CovalentError(f"invalid json from covalent ({exc})", cause=exc) from exc
        if not isinstance(payload, dict):
            raise CovalentError(f"Covalent returned {type(payload).__name__} (HTTP {resp.status_code})")
        if resp.status_code >= 400 or payload.get("error"):
            msg = payload.get("error_message") or payload.get("error") or resp.text
            raise CovalentError(f"Covalent request failed ({msg})")
        data = payload.get("data")
        if not isinstance(data, dict):
            raise CovalentError("Covalent response missing data")
        return data

    async def get_token_balances(self, address: str, chain_id: int) -> List[Dict[str, Any]]:
        chain = self._registry.get(chain_id)
        if chain is None or not chain.covalent_slug:
            return []

        data = await self._request(
            f"{chain.covalent_slug}/address/{address}/balances_v2/",
            {"quote-currency": "USD", "nft": "false", "no-nft-fetch": "true"},
        )
        items = data.get("items") or []
        if not isinstance(items, list):
            return []

        holdings: List[Dict[str, Any]] = []
        for item in items:
            if not isinstance(item, dict) or item.get("type") == "nft":
                continue
            raw_address = str(item.get("contract_address") or "").lower()
            if not raw_address:
                continue
            is_native = bool(item.get("native_token")) or raw_address in _NATIVE_ALIASES
            quote_rate = item.get("quote_rate")
            decimals = item.get("contract_decimals")
            if decimals is None:
                decimals = chain.native_decimals if is_native else 18
            holdings.append(
                {
                    "address": NATIVE_PLACEHOLDER if is_native else raw_address,
                    "symbol": item.get("contract_ticker_symbol") or (chain.symbol if is_native else ""),
                    "name": item.get("contract_name") or "",
                    "decimals": int(decimals),
                    "balance": str(item.get("balance") or "0"),
                    "price_usd": float(quote_rate) if quote_rate is not None else None,
                    "logo": item.get("logo_url"),
                    "native": is_native,
                }
            )
        return holdings
