"""
Wallet session models.

A WalletSession describes the single active connection. Events published to
subscribers are small frozen dataclasses, one per kind of transition.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union


class ConnectionState(str, Enum):
    """Lifecycle of the wallet connection."""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


@dataclass(frozen=True)
class AccountsChanged:
    accounts: Tuple[str, ...]

    @property
    def address(self) -> Optional[str]:
        return self.accounts[0] if self.accounts else None


@dataclass(frozen=True)
class ChainChanged:
    chain_id: int
    previous_chain_id: Optional[int] = None


@dataclass(frozen=True)
class Disconnected:
    reason: Optional[str] = None


WalletEvent = Union[AccountsChanged, ChainChanged, Disconnected]


@dataclass
class WalletSession:
    """The active connection. Only WalletSessionManager mutates it."""

    provider: Any = field(repr=False)
    accounts: List[str] = field(default_factory=list)
    chain_id: Optional[int] = None
    state: ConnectionState = ConnectionState.CONNECTED
    connected_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def address(self) -> Optional[str]:
        """First account is the active one."""
        return self.accounts[0] if self.accounts else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "address": self.address,
            "accounts": list(self.accounts),
            "chain_id": self.chain_id,
            "connected_at": self.connected_at.isoformat(),
        }
