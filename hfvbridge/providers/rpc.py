"""Read-only JSON-RPC access to chain endpoints."""

from __future__ import annotations

import itertools
import logging
from typing import Any, Dict, List, Optional

import httpx

from ..config import settings
from ..core.chains import ChainRegistry
from ..errors import RpcError

logger = logging.getLogger(__name__)

_request_ids = itertools.count(1)


def _to_int(value: Any) -> int:
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        return int(value, 16) if value.startswith("0x") else int(value)
    raise RpcError(f"Unexpected quantity in RPC response: {value!r}")


class JsonRpcClient:
    """Minimal async JSON-RPC client for one chain.

    Only read calls go through here; anything that needs a signature is routed
    through the wallet session.
    """

    def __init__(
        self,
        url: str,
        *,
        chain_id: Optional[int] = None,
        timeout_s: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.url = url
        self.chain_id = chain_id
        self.timeout_s = timeout_s or settings.rpc_timeout_seconds
        self._transport = transport

    async def call(self, method: str, params: Optional[List[Any]] = None) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params or [],
            "id": next(_request_ids),
        }

        async with httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport) as client:
            response = await client.post(
                self.url,
                json=payload,
                headers={"Content-Type": "application/json"},
            )
            response.raise_for_status()
            data = response.json()

        if "error" in data and data["error"]:
            error = data["error"]
            code = error.get("code") if isinstance(error, dict) else None
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise RpcError(f"RPC error from {method}: {message}", code=code, chain_id=self.chain_id)

        return data.get("result")

    async def get_balance(self, address: str, block: str = "latest") -> int:
        return _to_int(await self.call("eth_getBalance", [address, block]))

    async def eth_call(self, to: str, data: str, block: str = "latest") -> str:
        result = await self.call("eth_call", [{"to": to, "data": data}, block])
        if not isinstance(result, str):
            raise RpcError(f"eth_call returned {result!r}", chain_id=self.chain_id)
        return result

    async def estimate_gas(self, tx: Dict[str, Any]) -> int:
        return _to_int(await self.call("eth_estimateGas", [tx]))

    async def gas_price(self) -> int:
        return _to_int(await self.call("eth_gasPrice", []))

    async def fee_history(self, blocks: int = 1, percentiles: Optional[List[int]] = None) -> Dict[str, Any]:
        return await self.call("eth_feeHistory", [blocks, "latest", percentiles or [50]])

    async def get_transaction_receipt(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        return await self.call("eth_getTransactionReceipt", [tx_hash])

    async def block_number(self) -> int:
        return _to_int(await self.call("eth_blockNumber", []))


class ChainRpcPool:
    """Hands out one JsonRpcClient per chain that has an RPC endpoint."""

    def __init__(
        self,
        registry: ChainRegistry,
        *,
        timeout_s: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._registry = registry
        self._timeout_s = timeout_s
        self._transport = transport
        self._clients: Dict[int, JsonRpcClient] = {}

    def get(self, chain_id: int) -> Optional[JsonRpcClient]:
        client = self._clients.get(chain_id)
        if client is not None:
            return client

        url = self._registry.rpc_url(chain_id)
        if not url:
            return None

        if "{alchemy_key}" in url:
            if not settings.has_alchemy_key:
                logger.warning("RPC for chain %s needs an Alchemy key; none configured", chain_id)
                return None
            url = url.replace("{alchemy_key}", settings.alchemy_api_key)

        client = JsonRpcClient(url, chain_id=chain_id, timeout_s=self._timeout_s, transport=self._transport)
        self._clients[chain_id] = client
        return client
