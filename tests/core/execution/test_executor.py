import pytest

from conftest import FakeRpc, RpcFailure
from hfvbridge.core.execution import GasEstimate, PreparedTransaction, TransactionExecutor, TransactionStatus
from hfvbridge.providers.rpc import JsonRpcClient

SENDER = "0x1111111111111111111111111111111111111111"
ROUTER = "0x2222222222222222222222222222222222222222"


def _executor(rpc: FakeRpc, **kwargs) -> TransactionExecutor:
    client = JsonRpcClient("https://rpc.test/1", chain_id=1, transport=rpc.transport())
    return TransactionExecutor(client, gas_multiplier=1.1, poll_interval_s=0, **kwargs)


def _tx(value: int = 0) -> PreparedTransaction:
    return PreparedTransaction(chain_id=1, from_address=SENDER, to_address=ROUTER, data="0xdeadbeef", value=value)


@pytest.mark.asyncio
async def test_eip1559_estimate_applies_multiplier():
    rpc = FakeRpc(
        {
            "eth_estimateGas": "0x186a0",  # 100000
            "eth_feeHistory": {"baseFeePerGas": ["0x3b9aca00", "0x77359400"], "reward": [["0x3b9aca00"]]},
        }
    )

    gas = await _executor(rpc).estimate_gas(_tx(value=5))

    assert gas.gas_limit == 110000
    assert gas.max_priority_fee_per_gas == 10**9
    assert gas.max_fee_per_gas == 2 * 2 * 10**9 + 10**9
    assert gas.estimated_cost_wei == 110000 * 5 * 10**9
    estimate_call = [params for _, method, params in rpc.calls if method == "eth_estimateGas"][0]
    assert estimate_call[0]["value"] == "0x5"


@pytest.mark.asyncio
async def test_legacy_gas_price_when_fee_history_unsupported():
    def no_fee_history(params):
        raise RpcFailure(-32601, "method not supported")

    rpc = FakeRpc({"eth_estimateGas": "0x5208", "eth_feeHistory": no_fee_history, "eth_gasPrice": "0x12a05f200"})

    gas = await _executor(rpc).estimate_gas(_tx())

    assert gas.max_fee_per_gas is None
    assert gas.gas_price_wei == 5 * 10**9
    assert gas.tx_fields() == {"gas": hex(23100), "gasPrice": hex(5 * 10**9)}


def test_required_balance_includes_margin_and_value():
    gas = GasEstimate(gas_limit=100, gas_price_wei=10)

    assert gas.estimated_cost_wei == 1000
    assert gas.required_balance_wei(1.05, value_wei=7) == 1057


@pytest.mark.asyncio
async def test_receipt_confirmed():
    receipts = iter([None, {"blockNumber": "0x10", "gasUsed": "0x5208", "effectiveGasPrice": "0x3b9aca00", "status": "0x1"}])
    rpc = FakeRpc({"eth_getTransactionReceipt": lambda params: next(receipts)})

    receipt = await _executor(rpc).wait_for_receipt("0xabc", timeout_s=5)

    assert receipt.status == TransactionStatus.CONFIRMED
    assert receipt.succeeded
    assert receipt.block_number == 16
    assert receipt.gas_used == 21000
    assert rpc.count("eth_getTransactionReceipt") == 2


@pytest.mark.asyncio
async def test_receipt_reverted():
    rpc = FakeRpc({"eth_getTransactionReceipt": {"blockNumber": "0x10", "status": "0x0"}})

    receipt = await _executor(rpc).wait_for_receipt("0xabc", timeout_s=5)

    assert receipt.status == TransactionStatus.REVERTED
    assert not receipt.succeeded


@pytest.mark.asyncio
async def test_receipt_timeout():
    rpc = FakeRpc({"eth_getTransactionReceipt": None})

    receipt = await _executor(rpc).wait_for_receipt("0xabc", timeout_s=0.02)

    assert receipt.status == TransactionStatus.TIMEOUT
    assert "timeout" in receipt.error.lower()
