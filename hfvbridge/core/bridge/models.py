"""Typed models used by the bridge subsystem."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import ROUND_DOWN, Decimal
from enum import Enum
from typing import Any, Dict, Optional

from ..chains.models import Token
from ..execution.models import GasEstimate


class BridgePath(str, Enum):
    """Which route produced a quote or result."""
    HOSTED = "hosted"
    ONCHAIN = "onchain"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class BridgeRequest:
    """Inputs for one transfer. ``amount`` is in whole token units."""

    source_chain_id: int
    destination_chain_id: int
    token: Token
    amount: Decimal
    recipient: str

    @property
    def raw_amount(self) -> int:
        scaled = self.amount * (Decimal(10) ** self.token.decimals)
        return int(scaled.to_integral_value(rounding=ROUND_DOWN))

    @property
    def amount_str(self) -> str:
        return format(self.amount.normalize(), "f")

    def fingerprint(self) -> str:
        """Stable hash of the inputs a quote is valid for."""

        parts = (
            str(self.source_chain_id),
            str(self.destination_chain_id),
            self.token.key,
            self.amount_str,
            self.recipient.lower(),
        )
        return hashlib.sha256("|".join(parts).encode("utf-8")).hexdigest()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source_chain_id": self.source_chain_id,
            "destination_chain_id": self.destination_chain_id,
            "token": {"address": self.token.address, "symbol": self.token.symbol, "decimals": self.token.decimals},
            "amount": self.amount_str,
            "recipient": self.recipient,
        }


@dataclass(frozen=True)
class BridgeQuote:
    """A priced route for exactly one BridgeRequest."""

    request: BridgeRequest
    path: BridgePath
    quote_id: str
    estimated_output_amount: Decimal
    estimated_gas_usd: float
    fee_wei: Optional[int] = None
    created_at: datetime = field(default_factory=_utcnow)
    expires_at: Optional[datetime] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def fingerprint(self) -> str:
        return self.request.fingerprint()

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        return (now or _utcnow()) >= self.expires_at

    @staticmethod
    def expiry(ttl_seconds: float, now: Optional[datetime] = None) -> datetime:
        return (now or _utcnow()) + timedelta(seconds=ttl_seconds)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "quote_id": self.quote_id,
            "path": self.path.value,
            "request": self.request.to_dict(),
            "estimated_output_amount": str(self.estimated_output_amount),
            "estimated_gas_usd": self.estimated_gas_usd,
            "fee_wei": str(self.fee_wei) if self.fee_wei is not None else None,
            "created_at": self.created_at.isoformat(),
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
        }


@dataclass(frozen=True)
class BridgeResult:
    """Outcome of an executed transfer. Terminal."""

    tracking_id: str
    path: BridgePath
    quote_id: str
    tx_hash: Optional[str] = None
    gas: Optional[GasEstimate] = field(default=None, compare=False)
    created_at: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "tracking_id": self.tracking_id,
            "tx_hash": self.tx_hash,
            "path": self.path.value,
            "quote_id": self.quote_id,
            "created_at": self.created_at.isoformat(),
        }
        if self.gas is not None:
            payload["gas"] = {
                "gas_limit": self.gas.gas_limit,
                "estimated_cost_wei": str(self.gas.estimated_cost_wei),
                "estimated_cost_usd": self.gas.estimated_cost_usd,
            }
        return payload
