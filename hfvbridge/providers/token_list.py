"""
Per-chain token lists used by the on-chain balance sweep
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..cache import RequestCoalescer
from ..config import settings
from ..core.chains import ChainRegistry, Token, get_chain_registry

logger = logging.getLogger(__name__)


def _token_from_raw(chain_id: int, address: Any, raw: Dict[str, Any]) -> Optional[Token]:
    if not address or not isinstance(address, str):
        return None
    try:
        decimals = int(raw.get("decimals") if raw.get("decimals") is not None else 18)
    except (TypeError, ValueError):
        return None
    return Token(
        chain_id=chain_id,
        address=address,
        symbol=str(raw.get("symbol") or ""),
        name=str(raw.get("name") or ""),
        decimals=decimals,
        logo_uri=raw.get("logoURI") or raw.get("logoUri"),
    )


def normalize_token_list(chain_id: int, raw: Any) -> List[Token]:
    """Flatten the token list formats we fetch into Tokens for ``chain_id``.

    Accepts the 1inch shape (``{"tokens": {address: {...}}}``), the standard
    token list shape (``{"tokens": [...]}``) and a bare array. Entries that
    declare another ``chainId`` are skipped; duplicates by lowercase address
    keep the first occurrence.
    """

    tokens: List[Token] = []
    if not raw:
        return tokens

    if isinstance(raw, dict) and isinstance(raw.get("tokens"), dict):
        for address, item in raw["tokens"].items():
            if isinstance(item, dict):
                token = _token_from_raw(chain_id, item.get("address") or address, item)
                if token:
                    tokens.append(token)
    else:
        items = raw.get("tokens") if isinstance(raw, dict) else raw
        if isinstance(items, list):
            for item in items:
                if not isinstance(item, dict):
                    continue
                declared = item.get("chainId")
                if declared is not None and str(declared) != str(chain_id):
                    continue
                token = _token_from_raw(chain_id, item.get("address"), item)
                if token:
                    tokens.append(token)

    seen = set()
    unique: List[Token] = []
    for token in tokens:
        if token.key in seen:
            continue
        seen.add(token.key)
        unique.append(token)
    return unique


class TokenListProvider:
    """Loads and caches the token list for each chain for the process lifetime.

    The curated seed tokens from the registry come first so that a chain whose
    list URLs all fail still sweeps the stablecoins and wrapped natives.
    """

    name = "token_list"

    def __init__(
        self,
        registry: Optional[ChainRegistry] = None,
        *,
        timeout_s: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._registry = registry or get_chain_registry()
        self.timeout_s = timeout_s or settings.request_timeout_seconds
        self._transport = transport
        self._lists: Dict[int, List[Token]] = {}
        self._coalescer = RequestCoalescer()

    async def get_tokens(self, chain_id: int) -> List[Token]:
        cached = self._lists.get(chain_id)
        if cached is not None:
            return cached
        return await self._coalescer.run(chain_id, lambda: self._load(chain_id))

    async def _load(self, chain_id: int) -> List[Token]:
        merged: List[Token] = list(self._registry.curated_tokens(chain_id))
        chain = self._registry.get(chain_id)
        urls = chain.token_list_urls if chain else ()

        async with httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport) as client:
            for url in urls:
                try:
                    resp = await client.get(url, headers={"accept": "application/json"})
                    resp.raise_for_status()
                    merged.extend(normalize_token_list(chain_id, resp.json()))
                except (httpx.HTTPError, ValueError) as exc:
                    logger.warning("Token list fetch failed for chain %s (%s): %s", chain_id, url, exc)

        seen = set()
        tokens: List[Token] = []
        for token in merged:
            if token.key in seen or token.is_native:
                continue
            seen.add(token.key)
            tokens.append(token)

        self._lists[chain_id] = tokens
        logger.info("Loaded %d tokens for chain %s", len(tokens), chain_id)
        return tokens

    def clear(self) -> None:
        self._lists.clear()
