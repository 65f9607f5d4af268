from decimal import InvalidOperation

import httpx
import pytest

from hfvbridge.core.bridge import BridgePath, run_with_fallback
from hfvbridge.errors import InsufficientGasBalance, QuoteFailed, RpcError, StaleQuote


def _returns(value):
    async def call():
        return value

    return call


def _raises(exc):
    async def call():
        raise exc

    return call


@pytest.mark.asyncio
async def test_primary_success_is_tagged_hosted():
    outcome = await run_with_fallback(_returns("a"), _raises(AssertionError("unused")), terminal=QuoteFailed, operation="quote")

    assert outcome.path == BridgePath.HOSTED
    assert outcome.value == "a"
    assert not outcome.fell_back


@pytest.mark.asyncio
async def test_primary_failure_falls_back_once():
    attempts = []

    async def secondary():
        attempts.append(1)
        return "b"

    outcome = await run_with_fallback(
        _raises(httpx.ConnectError("down")), secondary, terminal=QuoteFailed, operation="quote"
    )

    assert outcome.path == BridgePath.ONCHAIN
    assert outcome.value == "b"
    assert outcome.fell_back
    assert isinstance(outcome.primary_error, httpx.ConnectError)
    assert attempts == [1]


@pytest.mark.asyncio
async def test_missing_primary_goes_straight_to_secondary():
    outcome = await run_with_fallback(None, _returns("b"), terminal=QuoteFailed, operation="quote")

    assert outcome.path == BridgePath.ONCHAIN
    assert not outcome.fell_back


@pytest.mark.asyncio
async def test_both_paths_failing_raises_terminal_with_cause():
    underlying = RpcError("execution reverted")

    with pytest.raises(QuoteFailed) as excinfo:
        await run_with_fallback(
            _raises(ValueError("bad payload")), _raises(underlying), terminal=QuoteFailed, operation="quote"
        )

    assert excinfo.value.cause is underlying
    assert excinfo.value.details == {"primary_error": "bad payload"}


@pytest.mark.asyncio
async def test_pass_through_errors_skip_the_fallback():
    attempts = []

    async def secondary():
        attempts.append(1)
        return "b"

    with pytest.raises(StaleQuote):
        await run_with_fallback(_raises(StaleQuote("old")), secondary, terminal=QuoteFailed, operation="quote")
    assert attempts == []

    with pytest.raises(InsufficientGasBalance):
        await run_with_fallback(
            None,
            _raises(InsufficientGasBalance("low", required_wei=2, available_wei=1)),
            terminal=QuoteFailed,
            operation="execute",
        )


@pytest.mark.asyncio
async def test_unexpected_errors_are_not_swallowed():
    with pytest.raises(ZeroDivisionError):
        await run_with_fallback(_raises(ZeroDivisionError()), _returns("b"), terminal=QuoteFailed, operation="quote")


@pytest.mark.asyncio
async def test_malformed_decimal_from_primary_falls_back():
    outcome = await run_with_fallback(
        _raises(InvalidOperation()), _returns("b"), terminal=QuoteFailed, operation="quote"
    )

    assert outcome.path == BridgePath.ONCHAIN
    assert outcome.fell_back
