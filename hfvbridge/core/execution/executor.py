"""
Transaction helpers for on-chain execution.

Handles the read-side of executing a transaction:
- Gas estimation (limit with multiplier, EIP-1559 fees)
- Confirmation monitoring

Submission itself always goes through the wallet session.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

import httpx

from ...config import settings
from ...errors import RpcError
from ...providers.rpc import JsonRpcClient
from .models import GasEstimate, PreparedTransaction, TransactionReceipt, TransactionStatus

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY_FEE_WEI = 1_000_000_000


class TransactionExecutor:
    """Gas estimation and receipt polling against one chain's RPC."""

    def __init__(
        self,
        rpc: JsonRpcClient,
        *,
        gas_multiplier: Optional[float] = None,
        poll_interval_s: Optional[float] = None,
    ):
        self.rpc = rpc
        self.gas_multiplier = gas_multiplier or settings.gas_limit_multiplier
        self.poll_interval_s = poll_interval_s if poll_interval_s is not None else settings.confirmation_poll_seconds

    async def estimate_gas(self, tx: PreparedTransaction) -> GasEstimate:
        """
        Estimate gas for a transaction.

        Args:
            tx: The prepared transaction

        Returns:
            GasEstimate with limit and price

        Raises:
            RpcError: If the node rejects the estimate (e.g. the call would revert)
        """
        gas_limit = await self.rpc.estimate_gas(tx.call_object())

        # Apply safety multiplier
        gas_limit = int(gas_limit * self.gas_multiplier)

        # Get gas price (EIP-1559 style), legacy gas price where fee history is unsupported
        try:
            fee_history = await self.rpc.fee_history(1, [50])
            base_fee = int(fee_history["baseFeePerGas"][-1], 16)
            reward = fee_history.get("reward") or []
            priority_fee = int(reward[0][0], 16) if reward and reward[0] else DEFAULT_PRIORITY_FEE_WEI
        except (RpcError, KeyError, IndexError, TypeError) as e:
            logger.debug(f"eth_feeHistory unavailable on chain {tx.chain_id}: {e}")
            gas_price = await self.rpc.gas_price()
            return GasEstimate(gas_limit=gas_limit, gas_price_wei=gas_price)

        max_fee = base_fee * 2 + priority_fee

        return GasEstimate(
            gas_limit=gas_limit,
            gas_price_wei=max_fee,
            max_fee_per_gas=max_fee,
            max_priority_fee_per_gas=priority_fee,
            estimated_cost_wei=gas_limit * max_fee,
        )

    async def wait_for_receipt(
        self,
        tx_hash: str,
        *,
        timeout_s: Optional[float] = None,
    ) -> TransactionReceipt:
        """Poll for the receipt until mined, reverted or timed out."""

        timeout_s = timeout_s or settings.confirmation_timeout_seconds
        result = TransactionReceipt(tx_hash=tx_hash, chain_id=self.rpc.chain_id or 0)
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout_s

        while True:
            try:
                receipt = await self.rpc.get_transaction_receipt(tx_hash)
            except (RpcError, httpx.HTTPError) as e:
                logger.warning(f"Error checking transaction status: {e}")
                receipt = None

            if receipt:
                result.block_number = int(receipt["blockNumber"], 16)
                result.gas_used = int(receipt.get("gasUsed", "0x0"), 16)
                result.effective_gas_price = int(receipt.get("effectiveGasPrice", "0x0"), 16)

                # 0x1 = success, 0x0 = revert
                if int(receipt.get("status", "0x1"), 16) == 0:
                    result.status = TransactionStatus.REVERTED
                    result.error = "Transaction reverted"
                    return result

                result.status = TransactionStatus.CONFIRMED
                result.confirmed_at = datetime.now(timezone.utc)
                logger.info(f"Transaction confirmed: {tx_hash} (block {result.block_number})")
                return result

            if loop.time() >= deadline:
                result.status = TransactionStatus.TIMEOUT
                result.error = f"Confirmation timeout after {timeout_s}s"
                return result

            await asyncio.sleep(self.poll_interval_s)
