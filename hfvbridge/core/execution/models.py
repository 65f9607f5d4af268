"""
Execution models for transactions sent through the wallet session.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class TransactionStatus(str, Enum):
    """Status of a submitted transaction."""
    SUBMITTED = "submitted"
    CONFIRMED = "confirmed"
    REVERTED = "reverted"
    TIMEOUT = "timeout"


@dataclass
class GasEstimate:
    """Gas estimation for a transaction."""
    gas_limit: int
    gas_price_wei: int
    max_fee_per_gas: Optional[int] = None      # EIP-1559
    max_priority_fee_per_gas: Optional[int] = None  # EIP-1559
    estimated_cost_wei: int = 0
    estimated_cost_usd: float = 0.0

    def __post_init__(self):
        if self.estimated_cost_wei == 0:
            self.estimated_cost_wei = self.gas_limit * self.gas_price_wei

    def required_balance_wei(self, margin: float, value_wei: int = 0) -> int:
        """Native balance needed to cover gas with ``margin`` plus any value sent."""
        return int(self.estimated_cost_wei * margin) + value_wei

    def tx_fields(self) -> Dict[str, str]:
        fields: Dict[str, str] = {"gas": hex(self.gas_limit)}
        if self.max_fee_per_gas is not None:
            fields["maxFeePerGas"] = hex(self.max_fee_per_gas)
            if self.max_priority_fee_per_gas is not None:
                fields["maxPriorityFeePerGas"] = hex(self.max_priority_fee_per_gas)
        else:
            fields["gasPrice"] = hex(self.gas_price_wei)
        return fields


@dataclass
class PreparedTransaction:
    """A transaction ready to be handed to the wallet."""
    chain_id: int
    from_address: str
    to_address: str
    data: str                                   # Encoded calldata (hex)
    value: int = 0                              # Wei to send
    gas_estimate: Optional[GasEstimate] = None
    description: str = ""

    def call_object(self) -> Dict[str, Any]:
        call: Dict[str, Any] = {
            "from": self.from_address,
            "to": self.to_address,
            "data": self.data,
        }
        if self.value > 0:
            call["value"] = hex(self.value)
        return call

    def to_request(self) -> Dict[str, Any]:
        """``eth_sendTransaction`` parameters."""
        request = self.call_object()
        request["chainId"] = hex(self.chain_id)
        if self.gas_estimate is not None:
            request.update(self.gas_estimate.tx_fields())
        return request


@dataclass
class TransactionReceipt:
    """Outcome of waiting for a transaction."""
    tx_hash: str
    chain_id: int
    status: TransactionStatus = TransactionStatus.SUBMITTED
    block_number: Optional[int] = None
    gas_used: Optional[int] = None
    effective_gas_price: Optional[int] = None
    error: Optional[str] = None
    submitted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    confirmed_at: Optional[datetime] = None

    @property
    def succeeded(self) -> bool:
        return self.status == TransactionStatus.CONFIRMED
