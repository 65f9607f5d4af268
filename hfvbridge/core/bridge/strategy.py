"""Two-step path strategy: try the hosted path, fall back to the on-chain path."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import InvalidOperation
from typing import Awaitable, Callable, Generic, Optional, Tuple, Type, TypeVar

import httpx
from eth_abi.exceptions import DecodingError

from ...errors import (
    BridgeCoreError,
    BridgeError,
    InsufficientGasBalance,
    InvalidRequest,
    NoRouterConfigured,
    StaleQuote,
    UnsupportedChain,
    WalletNotConnected,
)
from .models import BridgePath

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Failures that mean "this path did not work"
PATH_FAILURES: Tuple[Type[BaseException], ...] = (
    BridgeCoreError,
    httpx.HTTPError,
    DecodingError,
    InvalidOperation,
    ValueError,
    KeyError,
)

# Surfaced to the caller as-is, never wrapped or used to trigger the fallback
PASS_THROUGH: Tuple[Type[BaseException], ...] = (
    InsufficientGasBalance,
    InvalidRequest,
    NoRouterConfigured,
    StaleQuote,
    UnsupportedChain,
    WalletNotConnected,
)


@dataclass(frozen=True)
class PathOutcome(Generic[T]):
    path: BridgePath
    value: T
    primary_error: Optional[BaseException] = None

    @property
    def fell_back(self) -> bool:
        return self.path == BridgePath.ONCHAIN and self.primary_error is not None


async def run_with_fallback(
    primary: Optional[Callable[[], Awaitable[T]]],
    secondary: Callable[[], Awaitable[T]],
    *,
    terminal: Type[BridgeError],
    operation: str,
) -> PathOutcome[T]:
    """Attempt ``primary`` once, then ``secondary`` once.

    The result is tagged with the path that produced it. When both fail,
    ``terminal`` is raised with the last underlying error attached.
    """

    primary_error: Optional[BaseException] = None
    if primary is not None:
        try:
            return PathOutcome(path=BridgePath.HOSTED, value=await primary())
        except PASS_THROUGH:
            raise
        except PATH_FAILURES as exc:
            primary_error = exc
            logger.warning("Hosted %s failed, falling back to on-chain router: %s", operation, exc)

    try:
        value = await secondary()
    except PASS_THROUGH:
        raise
    except terminal:
        raise
    except PATH_FAILURES as exc:
        logger.error("On-chain %s failed: %s", operation, exc)
        raise terminal(
            f"Bridge {operation} failed on every path: {exc}",
            cause=exc,
            details={"primary_error": str(primary_error)} if primary_error is not None else None,
        ) from exc

    return PathOutcome(path=BridgePath.ONCHAIN, value=value, primary_error=primary_error)
