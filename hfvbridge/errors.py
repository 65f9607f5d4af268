"""
Error taxonomy for wallet, discovery, pricing and bridge operations.

Terminal errors (``ConnectTimeout``, ``QuoteFailed``, ``ExecuteFailed`` ...)
reach the caller. ``DiscoveryPartial`` and ``PriceUnavailable`` are absorbed
by the aggregate operations and only surface when explicitly requested.
"""

from typing import Any, Dict, Optional


class BridgeCoreError(Exception):
    """Base class for every error raised by hfvbridge."""

    def __init__(
        self,
        message: str,
        *,
        cause: Optional[BaseException] = None,
        chain_id: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.chain_id = chain_id
        self.details = details or {}
        if cause is not None:
            self.__cause__ = cause

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "error": type(self).__name__,
            "message": self.message,
        }
        if self.chain_id is not None:
            payload["chain_id"] = self.chain_id
        if self.cause is not None:
            payload["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        if self.details:
            payload["details"] = self.details
        return payload


# Transport
class RpcError(BridgeCoreError):
    """A JSON-RPC endpoint returned an error object or an unusable response."""

    def __init__(self, message: str, *, code: Optional[int] = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.code = code


# Wallet session
class WalletError(BridgeCoreError):
    pass


class ConnectTimeout(WalletError):
    """No provider or no account became available before the deadline."""


class ConnectRejected(WalletError):
    """The user or the provider explicitly refused the connection."""


class UnsupportedChain(WalletError):
    """The chain id has no ChainRegistry entry."""


class WalletNotConnected(WalletError):
    """An operation needed a signer but the session is disconnected."""


# Bridge
class BridgeError(BridgeCoreError):
    pass


class InvalidRequest(BridgeError):
    """Malformed bridge inputs; raised before any network call."""


class NoRouterConfigured(BridgeError):
    """The source chain has no router contract address."""


class QuoteFailed(BridgeError):
    """Both the hosted and the on-chain quote paths failed."""


class StaleQuote(BridgeError):
    """A quote no longer matches the latest inputs or has expired."""


class InsufficientGasBalance(BridgeError):
    """The signer cannot cover the estimated gas cost with the safety margin."""

    def __init__(self, message: str, *, required_wei: int, available_wei: int, **kwargs: Any):
        details = dict(kwargs.pop("details", None) or {})
        details.update({"required_wei": str(required_wei), "available_wei": str(available_wei)})
        super().__init__(message, details=details, **kwargs)
        self.required_wei = required_wei
        self.available_wei = available_wei


class ExecuteFailed(BridgeError):
    """Both the hosted and the on-chain execute paths failed."""


# Non-fatal
class DiscoveryPartial(BridgeCoreError):
    """Some chains returned no data during a portfolio sweep."""

    def __init__(self, message: str, *, failed_chains: Dict[int, str], **kwargs: Any):
        super().__init__(message, details={"failed_chains": failed_chains}, **kwargs)
        self.failed_chains = failed_chains


class PriceUnavailable(BridgeCoreError):
    """No price could be obtained; callers treat the price as zero."""
