"""Typed models for chains and tokens."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple

NATIVE_PLACEHOLDER = "0x0000000000000000000000000000000000000000"


@dataclass(frozen=True)
class Chain:
    """A supported network. Immutable after the registry is built."""

    chain_id: int
    key: str
    name: str
    symbol: str
    rpc_url: Optional[str] = None
    native_name: str = ""
    native_decimals: int = 18
    explorer_url: Optional[str] = None
    multicall_address: Optional[str] = None
    router_address: Optional[str] = None
    coingecko_platform: Optional[str] = None
    coingecko_native_id: Optional[str] = None
    covalent_slug: Optional[str] = None
    token_list_urls: Tuple[str, ...] = ()

    @property
    def hex_id(self) -> str:
        return hex(self.chain_id)

    @property
    def has_rpc(self) -> bool:
        return bool(self.rpc_url)

    def with_overrides(
        self,
        *,
        rpc_url: Optional[str] = None,
        router_address: Optional[str] = None,
    ) -> "Chain":
        changes: Dict[str, Any] = {}
        if rpc_url:
            changes["rpc_url"] = rpc_url
        if router_address:
            changes["router_address"] = router_address
        return replace(self, **changes) if changes else self

    def add_chain_params(self) -> Dict[str, Any]:
        """Parameters for ``wallet_addEthereumChain``."""

        params: Dict[str, Any] = {
            "chainId": self.hex_id,
            "chainName": self.name,
            "nativeCurrency": {
                "name": self.native_name or self.symbol,
                "symbol": self.symbol,
                "decimals": self.native_decimals,
            },
            "rpcUrls": [self.rpc_url] if self.rpc_url else [],
        }
        if self.explorer_url:
            params["blockExplorerUrls"] = [self.explorer_url]
        return params


@dataclass(frozen=True)
class Token:
    """An ERC-20 style asset on one chain."""

    chain_id: int
    address: str
    symbol: str
    decimals: int = 18
    name: str = ""
    is_native_wrapped: bool = False
    is_stablecoin: bool = False
    logo_uri: Optional[str] = field(default=None, compare=False)

    @property
    def key(self) -> str:
        return self.address.lower()

    @property
    def is_native(self) -> bool:
        return self.address.lower() == NATIVE_PLACEHOLDER

    @classmethod
    def native(cls, chain: Chain) -> "Token":
        return cls(
            chain_id=chain.chain_id,
            address=NATIVE_PLACEHOLDER,
            symbol=chain.symbol,
            decimals=chain.native_decimals,
            name=chain.native_name or chain.symbol,
        )
