"""
Balance and portfolio value objects.

BalanceEntry instances are snapshots: a sweep creates new ones and never
mutates existing entries.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from ...errors import DiscoveryPartial
from ..chains.models import NATIVE_PLACEHOLDER


class BalanceSource(str, Enum):
    """Where a balance entry came from."""
    NATIVE = "native"
    MULTICALL = "multicall"
    INDEXER = "indexer"
    HYBRID = "hybrid"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class BalanceEntry:
    """An owner's holding of one asset on one chain."""

    chain_id: int
    address: str
    symbol: str
    decimals: int
    balance: int
    source: BalanceSource
    name: str = ""
    usd_value: Optional[float] = None
    price_usd: Optional[float] = None
    logo_uri: Optional[str] = None
    fetched_at: datetime = field(default_factory=_utcnow)

    @property
    def key(self) -> str:
        return self.address.lower()

    @property
    def is_native(self) -> bool:
        return self.key == NATIVE_PLACEHOLDER

    @property
    def formatted_balance(self) -> Decimal:
        return Decimal(self.balance) / (Decimal(10) ** self.decimals)

    def with_price(self, price_usd: float) -> "BalanceEntry":
        """Copy with ``price_usd`` applied and ``usd_value`` recomputed."""
        return replace(
            self,
            price_usd=price_usd,
            usd_value=float(self.formatted_balance) * price_usd,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chain_id": self.chain_id,
            "address": self.address,
            "symbol": self.symbol,
            "name": self.name,
            "decimals": self.decimals,
            "balance": str(self.balance),
            "formatted_balance": str(self.formatted_balance),
            "is_native": self.is_native,
            "source": self.source.value,
            "usd_value": self.usd_value,
            "price_usd": self.price_usd,
            "logo_uri": self.logo_uri,
            "fetched_at": self.fetched_at.isoformat(),
        }


@dataclass(frozen=True)
class PortfolioChain:
    """Discovery result for one chain inside a portfolio sweep."""

    chain_id: int
    entries: Tuple[BalanceEntry, ...] = ()
    error: Optional[str] = None

    @property
    def total_usd(self) -> float:
        return sum(entry.usd_value or 0.0 for entry in self.entries)


@dataclass
class Portfolio:
    """Holdings across chains, with per-chain failures kept alongside."""

    owner: str
    chains: Dict[int, PortfolioChain] = field(default_factory=dict)
    dust_threshold_usd: float = 0.0
    fetched_at: datetime = field(default_factory=_utcnow)

    @property
    def by_chain(self) -> Dict[int, List[BalanceEntry]]:
        return {chain_id: list(chain.entries) for chain_id, chain in self.chains.items()}

    @property
    def all(self) -> List[BalanceEntry]:
        return [entry for chain in self.chains.values() for entry in chain.entries]

    @property
    def total_usd(self) -> float:
        return sum(chain.total_usd for chain in self.chains.values())

    @property
    def errors(self) -> Dict[int, str]:
        return {chain_id: chain.error for chain_id, chain in self.chains.items() if chain.error}

    def is_dust(self, entry: BalanceEntry) -> bool:
        return entry.usd_value is not None and entry.usd_value < self.dust_threshold_usd

    def visible_entries(self) -> List[BalanceEntry]:
        """Entries above the dust threshold; unpriced entries stay visible."""
        return [entry for entry in self.all if not self.is_dust(entry)]

    def dust_entries(self) -> List[BalanceEntry]:
        return [entry for entry in self.all if self.is_dust(entry)]

    def raise_for_partial(self) -> None:
        errors = self.errors
        if errors:
            raise DiscoveryPartial(
                f"Discovery failed on {len(errors)} chain(s)",
                failed_chains=errors,
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "owner": self.owner,
            "by_chain": {
                str(chain_id): [entry.to_dict() for entry in entries]
                for chain_id, entries in self.by_chain.items()
            },
            "all": [entry.to_dict() for entry in self.all],
            "total_usd": self.total_usd,
            "errors": {str(chain_id): error for chain_id, error in self.errors.items()},
            "dust_threshold_usd": self.dust_threshold_usd,
            "fetched_at": self.fetched_at.isoformat(),
        }
