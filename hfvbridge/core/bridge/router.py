"""Bridge router contract calls."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from ...providers.rpc import JsonRpcClient
from ...services.evm import decode_result, encode_call, from_raw_amount
from .constants import (
    ALLOWANCE_ARGS,
    ALLOWANCE_SIGNATURE,
    APPROVE_ARGS,
    APPROVE_SIGNATURE,
    BRIDGE_TOKEN_ARGS,
    BRIDGE_TOKEN_SIGNATURE,
    GAS_USD_DECIMALS,
    QUOTE_BRIDGE_ARGS,
    QUOTE_BRIDGE_RESULT,
    QUOTE_BRIDGE_SIGNATURE,
)


@dataclass(frozen=True)
class RouterQuote:
    dst_amount: int
    fee_amount: int
    gas_usd_raw: int

    @property
    def gas_usd(self) -> Decimal:
        return from_raw_amount(self.gas_usd_raw, GAS_USD_DECIMALS)


class RouterContract:
    """Read and encode calls against one chain's bridge router."""

    def __init__(self, rpc: JsonRpcClient, address: str):
        self.rpc = rpc
        self.address = address

    async def quote_bridge(self, token: str, amount: int, dst_chain_id: int, recipient: str) -> RouterQuote:
        data = encode_call(QUOTE_BRIDGE_SIGNATURE, QUOTE_BRIDGE_ARGS, [token, amount, dst_chain_id, recipient])
        raw = await self.rpc.eth_call(self.address, data)
        dst_amount, fee_amount, gas_usd = decode_result(QUOTE_BRIDGE_RESULT, raw)
        return RouterQuote(dst_amount=int(dst_amount), fee_amount=int(fee_amount), gas_usd_raw=int(gas_usd))

    def bridge_token_calldata(self, token: str, amount: int, dst_chain_id: int, recipient: str) -> str:
        return encode_call(BRIDGE_TOKEN_SIGNATURE, BRIDGE_TOKEN_ARGS, [token, amount, dst_chain_id, recipient])

    async def allowance(self, token: str, owner: str) -> int:
        data = encode_call(ALLOWANCE_SIGNATURE, ALLOWANCE_ARGS, [owner, self.address])
        raw = await self.rpc.eth_call(token, data)
        (value,) = decode_result(["uint256"], raw)
        return int(value)

    def approve_calldata(self, amount: int) -> str:
        return encode_call(APPROVE_SIGNATURE, APPROVE_ARGS, [self.address, amount])
