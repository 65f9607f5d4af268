"""Batched read calls through the Multicall3 ``tryAggregate`` entry point."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import httpx
from eth_abi.exceptions import DecodingError

from ..config import settings
from ..errors import RpcError
from ..providers.rpc import JsonRpcClient
from .evm import decode_result, encode_call, strip_0x

logger = logging.getLogger(__name__)

TRY_AGGREGATE_SIGNATURE = "tryAggregate(bool,(address,bytes)[])"
TRY_AGGREGATE_ARGS = ["bool", "(address,bytes)[]"]
TRY_AGGREGATE_RESULT = ["(bool,bytes)[]"]


@dataclass(frozen=True)
class CallResult:
    index: int
    target: str
    success: bool
    return_data: bytes = b""


class MulticallBatch:
    """Accumulates calls, then flushes them in fixed-size chunks.

    Results come back as one flat list in the order the calls were added, so
    callers can index them back to whatever produced each call. A chunk that
    fails as a whole marks its calls unsuccessful instead of raising.
    """

    def __init__(
        self,
        rpc: JsonRpcClient,
        multicall_address: str,
        *,
        chunk_size: Optional[int] = None,
    ) -> None:
        self.rpc = rpc
        self.multicall_address = multicall_address
        self.chunk_size = chunk_size or settings.multicall_chunk_size
        self._calls: List[Tuple[str, bytes]] = []

    def add(self, target: str, calldata: str) -> int:
        self._calls.append((target.lower(), bytes.fromhex(strip_0x(calldata))))
        return len(self._calls) - 1

    def __len__(self) -> int:
        return len(self._calls)

    def chunks(self) -> List[List[Tuple[str, bytes]]]:
        return [self._calls[i:i + self.chunk_size] for i in range(0, len(self._calls), self.chunk_size)]

    async def execute(self) -> List[CallResult]:
        results: List[CallResult] = []
        offset = 0
        for chunk in self.chunks():
            results.extend(await self._execute_chunk(chunk, offset))
            offset += len(chunk)
        return results

    async def _execute_chunk(self, chunk: List[Tuple[str, bytes]], offset: int) -> List[CallResult]:
        data = encode_call(TRY_AGGREGATE_SIGNATURE, TRY_AGGREGATE_ARGS, [False, chunk])
        try:
            raw = await self.rpc.eth_call(self.multicall_address, data)
            (decoded,) = decode_result(TRY_AGGREGATE_RESULT, raw)
        except (RpcError, httpx.HTTPError, DecodingError, ValueError) as exc:
            logger.warning(
                "Multicall chunk of %d calls failed on chain %s: %s",
                len(chunk),
                self.rpc.chain_id,
                exc,
            )
            return [
                CallResult(index=offset + i, target=target, success=False)
                for i, (target, _) in enumerate(chunk)
            ]

        results: List[CallResult] = []
        for i, (target, _) in enumerate(chunk):
            if i < len(decoded):
                success, return_data = decoded[i]
                results.append(CallResult(index=offset + i, target=target, success=bool(success), return_data=bytes(return_data)))
            else:
                results.append(CallResult(index=offset + i, target=target, success=False))
        return results
