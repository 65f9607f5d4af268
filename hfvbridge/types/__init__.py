from .requests import BridgeExecuteRequest, BridgeQuoteRequest, PreferencesUpdate, SwitchChainRequest
from .responses import (
    BalanceEntryModel,
    BridgeExecuteResponse,
    BridgeQuoteResponse,
    ChainInfo,
    ChainsResponse,
    ErrorResponse,
    NativePricesResponse,
    PortfolioResponse,
    PreferencesResponse,
    WalletStatusResponse,
)

__all__ = [
    "BridgeExecuteRequest",
    "BridgeQuoteRequest",
    "PreferencesUpdate",
    "SwitchChainRequest",
    "BalanceEntryModel",
    "BridgeExecuteResponse",
    "BridgeQuoteResponse",
    "ChainInfo",
    "ChainsResponse",
    "ErrorResponse",
    "NativePricesResponse",
    "PortfolioResponse",
    "PreferencesResponse",
    "WalletStatusResponse",
]
