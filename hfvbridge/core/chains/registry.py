"""Static chain registry with id, key and alias lookups."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Set

from ...config import settings
from ...errors import UnsupportedChain
from .constants import (
    BRIDGE_TOKEN_SYMBOLS,
    CHAIN_ALIAS_EXPANSIONS,
    CHAIN_METADATA,
    CURATED_TOKENS,
    TOKENLIST_SOURCES,
)
from .models import Chain, Token


def _default_chains() -> List[Chain]:
    chains: List[Chain] = []
    for chain_id, meta in CHAIN_METADATA.items():
        chains.append(
            Chain(
                chain_id=chain_id,
                token_list_urls=tuple(TOKENLIST_SOURCES.get(chain_id, ())),
                **meta,
            )
        )
    return chains


def _curated_tokens(chain_id: int) -> List[Token]:
    return [
        Token(
            chain_id=chain_id,
            address=address,
            symbol=symbol,
            name=name,
            decimals=decimals,
            is_native_wrapped=wrapped,
            is_stablecoin=stable,
        )
        for address, symbol, name, decimals, wrapped, stable in CURATED_TOKENS.get(chain_id, [])
    ]


class ChainRegistry:
    """Immutable table of supported chains.

    Built once at process start from the static metadata plus configured RPC
    and router overrides. Pure lookups; holds no mutable state.

    Usage:
        registry = ChainRegistry.from_settings()
        chain = registry.require(8453)
        registry.get_chain_id("arb")  # 42161
    """

    def __init__(
        self,
        chains: Optional[Iterable[Chain]] = None,
        *,
        rpc_overrides: Optional[Mapping[int, str]] = None,
        router_overrides: Optional[Mapping[int, str]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._logger = logger or logging.getLogger(__name__)
        rpc_overrides = rpc_overrides or {}
        router_overrides = router_overrides or {}

        self._chains: Dict[int, Chain] = {}
        for chain in chains if chains is not None else _default_chains():
            self._chains[chain.chain_id] = chain.with_overrides(
                rpc_url=rpc_overrides.get(chain.chain_id),
                router_address=router_overrides.get(chain.chain_id),
            )
        self._alias_to_id = self._build_aliases(self._chains.values())

    @classmethod
    def from_settings(cls, config=None) -> "ChainRegistry":
        config = config or settings
        return cls(
            rpc_overrides=config.rpc_url_overrides,
            router_overrides=config.router_addresses,
        )

    @staticmethod
    def _build_aliases(chains: Iterable[Chain]) -> Dict[str, int]:
        aliases: Dict[str, int] = {}
        for chain in chains:
            names: Set[str] = {chain.key, chain.name.lower(), str(chain.chain_id)}
            words = chain.name.lower().split()
            if len(words) > 1:
                names.add(words[0])
            names.update(CHAIN_ALIAS_EXPANSIONS.get(chain.key, []))
            for alias in names:
                # First registration wins ("ethereum classic" must not shadow "ethereum")
                aliases.setdefault(alias.strip(), chain.chain_id)
        aliases.pop("", None)
        return aliases

    # ─────────────────────────────────────────────────────────────────────────
    # Lookups
    # ─────────────────────────────────────────────────────────────────────────

    def get(self, chain_id: int) -> Optional[Chain]:
        return self._chains.get(int(chain_id))

    def require(self, chain_id: int) -> Chain:
        chain = self.get(chain_id)
        if chain is None:
            raise UnsupportedChain(f"Chain {chain_id} is not supported", chain_id=chain_id)
        return chain

    def is_supported(self, chain_id: int) -> bool:
        return int(chain_id) in self._chains

    def get_chain_id(self, alias: str) -> Optional[int]:
        """Look up a chain id by key, name or alias."""
        return self._alias_to_id.get(alias.lower().strip())

    def by_key(self, key: str) -> Optional[Chain]:
        chain_id = self.get_chain_id(key)
        return self._chains.get(chain_id) if chain_id is not None else None

    def all(self) -> List[Chain]:
        return list(self._chains.values())

    def chain_ids(self) -> List[int]:
        return list(self._chains.keys())

    def with_rpc(self) -> List[Chain]:
        return [chain for chain in self._chains.values() if chain.has_rpc]

    def rpc_url(self, chain_id: int) -> Optional[str]:
        chain = self.get(chain_id)
        return chain.rpc_url if chain else None

    def router_address(self, chain_id: int) -> Optional[str]:
        chain = self.get(chain_id)
        return chain.router_address if chain else None

    def multicall_address(self, chain_id: int) -> Optional[str]:
        chain = self.get(chain_id)
        return chain.multicall_address if chain else None

    def native_token(self, chain_id: int) -> Token:
        return Token.native(self.require(chain_id))

    def curated_tokens(self, chain_id: int) -> List[Token]:
        return _curated_tokens(int(chain_id))

    def bridge_tokens(self, chain_id: int) -> List[Token]:
        """Tokens offered for bridging: wrapped natives, stablecoins and the majors."""
        return [
            token
            for token in self.curated_tokens(chain_id)
            if token.is_native_wrapped or token.is_stablecoin or token.symbol in BRIDGE_TOKEN_SYMBOLS
        ]

    def find_token(self, chain_id: int, address_or_symbol: str) -> Optional[Token]:
        needle = address_or_symbol.lower().strip()
        for token in self.curated_tokens(chain_id):
            if token.key == needle or token.symbol.lower() == needle:
                return token
        return None

    @property
    def chain_count(self) -> int:
        return len(self._chains)


# Module-level default for the API and CLI entry points
_default_registry: Optional[ChainRegistry] = None


def get_chain_registry() -> ChainRegistry:
    global _default_registry
    if _default_registry is None:
        _default_registry = ChainRegistry.from_settings()
    return _default_registry
