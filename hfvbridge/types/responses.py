from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class ChainInfo(BaseModel):
    chain_id: int = Field(description="Numeric chain id")
    key: str = Field(description="Short chain key, e.g. 'arbitrum'")
    name: str = Field(description="Display name")
    symbol: str = Field(description="Native asset symbol")
    has_rpc: bool = Field(description="Whether a read RPC endpoint is configured")
    explorer_url: Optional[str] = Field(default=None, description="Block explorer base URL")
    has_router: bool = Field(default=False, description="Whether an on-chain bridge router is configured")


class ChainsResponse(BaseModel):
    chains: List[ChainInfo] = Field(default_factory=list)
    count: int = Field(default=0)


class BalanceEntryModel(BaseModel):
    chain_id: int
    address: str
    symbol: str
    name: str = ""
    decimals: int
    balance: str = Field(description="Raw integer balance as a string")
    formatted_balance: str = Field(description="Balance in whole token units")
    is_native: bool = False
    source: str
    usd_value: Optional[float] = None
    price_usd: Optional[float] = None
    logo_uri: Optional[str] = None
    fetched_at: datetime


class PortfolioResponse(BaseModel):
    owner: str = Field(description="Wallet address that was swept")
    by_chain: Dict[str, List[BalanceEntryModel]] = Field(default_factory=dict)
    all: List[BalanceEntryModel] = Field(default_factory=list)
    total_usd: float = Field(default=0.0)
    errors: Dict[str, str] = Field(default_factory=dict, description="Chains that returned no data, with the reason")
    dust_threshold_usd: float = Field(default=0.0)
    fetched_at: datetime


class NativePricesResponse(BaseModel):
    prices: Dict[str, float] = Field(default_factory=dict, description="USD price of the native asset by chain id")


class BridgeQuoteResponse(BaseModel):
    quote_id: str
    path: str = Field(description="'hosted' or 'onchain'")
    request: Dict[str, Any]
    estimated_output_amount: str
    estimated_gas_usd: float
    fee_wei: Optional[str] = None
    created_at: datetime
    expires_at: Optional[datetime] = None


class BridgeExecuteResponse(BaseModel):
    tracking_id: str
    tx_hash: Optional[str] = None
    path: str
    quote_id: str
    created_at: datetime
    gas: Optional[Dict[str, Any]] = None


class WalletStatusResponse(BaseModel):
    state: str = Field(description="disconnected, connecting or connected")
    address: Optional[str] = None
    accounts: List[str] = Field(default_factory=list)
    chain_id: Optional[int] = None
    connected_at: Optional[datetime] = None


class PreferencesResponse(BaseModel):
    source_chain_id: int
    destination_chain_id: int


class ErrorResponse(BaseModel):
    error: str = Field(description="Error class name")
    message: str
    chain_id: Optional[int] = None
    cause: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)
