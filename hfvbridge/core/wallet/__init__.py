"""
Wallet Session Module

Owns the single active wallet connection:
- WalletSessionManager: connect, restore, switch chain, sign, send, disconnect
- WalletEventBus: typed AccountsChanged / ChainChanged / Disconnected events
- HttpWalletProvider: EIP-1193 provider over a local JSON-RPC wallet endpoint

Usage:
    from hfvbridge.core.wallet import get_wallet_manager, ChainChanged

    manager = get_wallet_manager()
    manager.subscribe(lambda event: print(event), events=[ChainChanged])
    session = await manager.connect()
    await manager.switch_chain(8453)
"""

from .events import WalletEventBus, WalletListener
from .models import (
    AccountsChanged,
    ChainChanged,
    ConnectionState,
    Disconnected,
    WalletEvent,
    WalletSession,
)
from .provider import (
    UNRECOGNIZED_CHAIN,
    USER_REJECTED,
    ConnectionSurface,
    EIP1193Provider,
    HttpWalletProvider,
    HttpWalletSurface,
)
from .session_manager import Signer, WalletSessionManager, get_wallet_manager

__all__ = [
    # Models
    "AccountsChanged",
    "ChainChanged",
    "ConnectionState",
    "Disconnected",
    "WalletEvent",
    "WalletSession",
    # Events
    "WalletEventBus",
    "WalletListener",
    # Providers
    "UNRECOGNIZED_CHAIN",
    "USER_REJECTED",
    "ConnectionSurface",
    "EIP1193Provider",
    "HttpWalletProvider",
    "HttpWalletSurface",
    # Manager
    "Signer",
    "WalletSessionManager",
    "get_wallet_manager",
]
