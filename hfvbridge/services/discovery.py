"""
Balance discovery for one owner on one chain.

Combines three sources:
- the native balance from the chain RPC
- a Multicall3 ``balanceOf`` sweep over the chain's token list
- an optional indexer (Covalent)

Merge rule, by lowercase contract address:
- indexer metadata (symbol, name, decimals, price) replaces on-chain metadata
- the indexer balance replaces the on-chain balance whenever the indexer
  reports one; the merged entry is tagged ``hybrid``
- zero balances from the native read and the multicall sweep are dropped,
  indexer entries are kept as reported
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Union

import httpx

from ..cache import RequestCoalescer, TTLCache
from ..config import settings
from ..core.chains import NATIVE_PLACEHOLDER, Chain, ChainRegistry, Token, get_chain_registry
from ..core.portfolio import BalanceEntry, BalanceSource
from ..errors import BridgeCoreError, RpcError, UnsupportedChain
from ..providers.base import IndexerProvider
from ..providers.rpc import ChainRpcPool, JsonRpcClient
from ..providers.token_list import TokenListProvider
from .evm import decode_result, encode_call
from .multicall import MulticallBatch

logger = logging.getLogger(__name__)

BALANCE_OF_SIGNATURE = "balanceOf(address)"


class DiscoveryMode(str, Enum):
    HYBRID = "hybrid"
    ONCHAIN_ONLY = "onchain-only"
    INDEXER_ONLY = "indexer-only"


def _parse_balance(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class BalanceDiscoveryEngine:
    """Finds every non-zero holding of ``owner`` on a chain, cached per (chain, owner)."""

    def __init__(
        self,
        registry: Optional[ChainRegistry] = None,
        *,
        rpc_pool: Optional[ChainRpcPool] = None,
        token_lists: Optional[TokenListProvider] = None,
        indexer: Optional[IndexerProvider] = None,
        cache: Optional[TTLCache] = None,
        mode: Union[DiscoveryMode, str, None] = None,
        chunk_size: Optional[int] = None,
    ) -> None:
        self.registry = registry or get_chain_registry()
        self.rpc_pool = rpc_pool or ChainRpcPool(self.registry)
        self.token_lists = token_lists or TokenListProvider(self.registry)
        self.indexer = indexer
        self.cache = cache or TTLCache(default_ttl=settings.balance_cache_ttl_seconds, max_size=settings.max_cache_size)
        self.mode = DiscoveryMode(mode or settings.discovery_mode)
        self.chunk_size = chunk_size or settings.multicall_chunk_size
        self._coalescer = RequestCoalescer()

    async def discover(
        self,
        chain_id: int,
        owner: str,
        mode: Union[DiscoveryMode, str, None] = None,
    ) -> List[BalanceEntry]:
        if not owner:
            return []
        mode = DiscoveryMode(mode or self.mode)
        chain = self.registry.get(chain_id)
        if chain is None:
            raise UnsupportedChain(f"Chain {chain_id} is not supported", chain_id=chain_id)

        key = (chain.chain_id, owner.lower(), mode.value)
        cached = await self.cache.get(key)
        if cached is not None:
            return list(cached)

        async def load() -> List[BalanceEntry]:
            entries = await self._discover_uncached(chain, owner, mode)
            await self.cache.set(key, tuple(entries))
            return entries

        return list(await self._coalescer.run(key, load))

    async def invalidate(self, chain_id: int, owner: str) -> None:
        for mode in DiscoveryMode:
            await self.cache.delete((chain_id, owner.lower(), mode.value))

    # ─────────────────────────────────────────────────────────────────────────
    # Sources
    # ─────────────────────────────────────────────────────────────────────────

    async def _discover_uncached(self, chain: Chain, owner: str, mode: DiscoveryMode) -> List[BalanceEntry]:
        rpc = self.rpc_pool.get(chain.chain_id)
        if rpc is None and mode != DiscoveryMode.INDEXER_ONLY:
            logger.info("No RPC endpoint for chain %s; skipping discovery", chain.chain_id)
            return []

        native_task = self._native_balance(rpc, chain, owner) if rpc is not None else _none()
        sweep_task = (
            self._multicall_sweep(rpc, chain, owner)
            if rpc is not None and mode != DiscoveryMode.INDEXER_ONLY
            else _empty()
        )
        indexer_task = (
            self._indexer_balances(chain, owner)
            if mode != DiscoveryMode.ONCHAIN_ONLY
            else _empty()
        )

        native, onchain, indexed = await asyncio.gather(native_task, sweep_task, indexer_task)
        entries = merge_balances(chain.chain_id, native, onchain, indexed)
        logger.info(
            "Discovered %d balances for %s on chain %s (onchain=%d, indexer=%d)",
            len(entries),
            owner,
            chain.chain_id,
            len(onchain),
            len(indexed),
        )
        return entries

    async def _native_balance(self, rpc: JsonRpcClient, chain: Chain, owner: str) -> Optional[BalanceEntry]:
        # An unreachable RPC fails the whole chain; the aggregator records it
        balance = await rpc.get_balance(owner)
        if balance <= 0:
            return None
        native = Token.native(chain)
        return BalanceEntry(
            chain_id=chain.chain_id,
            address=NATIVE_PLACEHOLDER,
            symbol=native.symbol,
            name=native.name,
            decimals=native.decimals,
            balance=balance,
            source=BalanceSource.NATIVE,
        )

    async def _multicall_sweep(self, rpc: JsonRpcClient, chain: Chain, owner: str) -> List[BalanceEntry]:
        tokens = await self.token_lists.get_tokens(chain.chain_id)
        if not tokens:
            return []

        calldata = encode_call(BALANCE_OF_SIGNATURE, ["address"], [owner])
        if chain.multicall_address:
            batch = MulticallBatch(rpc, chain.multicall_address, chunk_size=self.chunk_size)
            for token in tokens:
                batch.add(token.address, calldata)
            results = [(r.success, r.return_data) for r in await batch.execute()]
        else:
            # No aggregator deployed: read the curated tokens one call at a time
            tokens = self.registry.curated_tokens(chain.chain_id)
            results = await asyncio.gather(*(self._single_balance_of(rpc, token, calldata) for token in tokens))

        entries: List[BalanceEntry] = []
        skipped = 0
        for token, (success, return_data) in zip(tokens, results):
            balance = self._decode_balance(success, return_data)
            if balance is None:
                skipped += 1
                logger.debug("balanceOf failed for %s on chain %s", token.address, chain.chain_id)
                continue
            if balance <= 0:
                continue
            entries.append(
                BalanceEntry(
                    chain_id=chain.chain_id,
                    address=token.address,
                    symbol=token.symbol,
                    name=token.name,
                    decimals=token.decimals,
                    balance=balance,
                    source=BalanceSource.MULTICALL,
                    logo_uri=token.logo_uri,
                )
            )
        if skipped:
            logger.info("Skipped %d token calls that failed on chain %s", skipped, chain.chain_id)
        return entries

    async def _single_balance_of(self, rpc: JsonRpcClient, token: Token, calldata: str):
        try:
            raw = await rpc.eth_call(token.address, calldata)
        except (RpcError, httpx.HTTPError) as exc:
            logger.debug("balanceOf call failed for %s: %s", token.address, exc)
            return False, b""
        return True, bytes.fromhex(raw[2:] if raw.startswith("0x") else raw)

    @staticmethod
    def _decode_balance(success: bool, return_data: bytes) -> Optional[int]:
        if not success or len(return_data) < 32:
            return None
        (balance,) = decode_result(["uint256"], return_data[:32])
        return int(balance)

    async def _indexer_balances(self, chain: Chain, owner: str) -> List[Dict[str, Any]]:
        if self.indexer is None or not await self.indexer.ready():
            return []
        try:
            return await self.indexer.get_token_balances(owner, chain.chain_id)
        except (BridgeCoreError, httpx.HTTPError) as exc:
            logger.warning("Indexer balances failed for chain %s: %s", chain.chain_id, exc)
            return []


async def _none() -> None:
    return None


async def _empty() -> List[Any]:
    return []


def merge_balances(
    chain_id: int,
    native: Optional[BalanceEntry],
    onchain: List[BalanceEntry],
    indexed: List[Dict[str, Any]],
) -> List[BalanceEntry]:
    """Merge the three sources into at most one entry per address."""

    merged: Dict[str, BalanceEntry] = {}
    if native is not None:
        merged[native.key] = native
    for entry in onchain:
        if entry.balance > 0:
            merged.setdefault(entry.key, entry)

    for item in indexed:
        address = str(item.get("address") or "").lower()
        if not address:
            continue
        base = merged.get(address)
        indexed_balance = _parse_balance(item.get("balance"))
        price = item.get("price_usd")

        if base is not None:
            entry = BalanceEntry(
                chain_id=base.chain_id,
                address=base.address,
                symbol=item.get("symbol") or base.symbol,
                name=item.get("name") or base.name,
                decimals=int(item.get("decimals") if item.get("decimals") is not None else base.decimals),
                balance=indexed_balance if indexed_balance is not None else base.balance,
                source=BalanceSource.HYBRID,
                logo_uri=item.get("logo") or base.logo_uri,
            )
        else:
            entry = BalanceEntry(
                chain_id=chain_id,
                address=address,
                symbol=item.get("symbol") or "",
                name=item.get("name") or "",
                decimals=int(item.get("decimals") if item.get("decimals") is not None else 18),
                balance=indexed_balance or 0,
                source=BalanceSource.INDEXER,
                logo_uri=item.get("logo"),
            )
        if price is not None:
            entry = entry.with_price(float(price))
        merged[address] = entry

    # native first, then insertion order
    return sorted(merged.values(), key=lambda e: not e.is_native)
