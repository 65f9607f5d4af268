import os

from pathlib import Path
from typing import Any, Dict

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    def model_post_init(self, __context: Any) -> None:
        """Pick up the per-chain RPC variables used by the web frontend (``VITE_RPC_<id>``)."""

        super().model_post_init(__context)

        overrides = dict(self.rpc_url_overrides)
        for key, value in os.environ.items():
            upper = key.upper()
            if not upper.startswith("VITE_RPC_") or not value:
                continue
            suffix = upper[len("VITE_RPC_"):]
            if suffix.isdigit():
                overrides.setdefault(int(suffix), value)
        if overrides != self.rpc_url_overrides:
            object.__setattr__(self, "rpc_url_overrides", overrides)

    # Server Settings
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=8000, description="Server port")
    log_level: str = Field(default="INFO", description="Logging level")

    # External API Keys
    alchemy_api_key: str = Field(
        default="",
        description="Alchemy API key substituted into Alchemy-hosted RPC URLs",
        validation_alias=AliasChoices("alchemy_api_key", "VITE_ALCHEMY_API_KEY"),
    )
    coingecko_api_key: str = Field(
        default="",
        description="Coingecko demo API key",
        validation_alias=AliasChoices("coingecko_api_key", "VITE_COINGECKO_API_KEY"),
    )
    covalent_api_key: str = Field(
        default="",
        description="Covalent API key used by the balance indexer",
        validation_alias=AliasChoices("covalent_api_key", "covalent_key", "VITE_COVALENT_KEY"),
    )

    # Endpoints
    coingecko_base_url: str = Field(default="https://api.coingecko.com/api/v3", description="Price service base URL")
    covalent_base_url: str = Field(default="https://api.covalenthq.com/v1", description="Indexer base URL")
    hosted_bridge_base_url: str = Field(
        default="https://hfv-api.onrender.com/api",
        description="Hosted bridge API base URL",
        validation_alias=AliasChoices("hosted_bridge_base_url", "VITE_HFV_API_BASE_URL"),
    )
    hosted_bridge_env: str = Field(default="mainnet", description="Hosted bridge environment")
    wallet_rpc_url: str = Field(
        default="http://127.0.0.1:1248",
        description="EIP-1193 compatible wallet endpoint (JSON-RPC over HTTP)",
    )
    rpc_url_overrides: Dict[int, str] = Field(default_factory=dict, description="Per-chain RPC URL overrides")
    router_addresses: Dict[int, str] = Field(default_factory=dict, description="Per-chain bridge router overrides")

    # Cache Settings
    price_cache_ttl_seconds: int = Field(default=60, description="Price cache TTL in seconds")
    balance_cache_ttl_seconds: int = Field(default=60, description="Balance discovery cache TTL in seconds")
    max_cache_size: int = Field(default=1000, description="Maximum entries per cache")

    # Timeouts
    request_timeout_seconds: float = Field(default=15, description="Default outbound HTTP timeout")
    rpc_timeout_seconds: float = Field(default=20, description="JSON-RPC request timeout")
    connect_timeout_seconds: float = Field(default=30, description="Wallet connect wait deadline")
    connect_poll_interval_seconds: float = Field(default=0.25, description="Wallet connect poll interval")
    confirmation_timeout_seconds: float = Field(default=300, description="Transaction receipt wait deadline")
    confirmation_poll_seconds: float = Field(default=2, description="Transaction receipt poll interval")

    # Discovery
    discovery_mode: str = Field(default="hybrid", description="hybrid, onchain-only or indexer-only")
    multicall_chunk_size: int = Field(default=200, ge=1, description="balanceOf calls per multicall batch")
    dust_threshold_usd: float = Field(default=1.0, ge=0, description="Holdings below this USD value are dust")

    # Bridge
    gas_safety_margin: float = Field(default=1.05, ge=1.0, description="Native balance must cover gas x margin")
    gas_limit_multiplier: float = Field(default=1.1, ge=1.0, description="Multiplier applied to eth_estimateGas")
    quote_ttl_seconds: int = Field(default=60, description="Bridge quote validity window")

    # Persistence
    preferences_path: Path = Field(
        default=Path.home() / ".hfvbridge" / "preferences.json",
        description="Key/value file holding last-used chain selections",
    )

    # Provider Toggles
    enable_coingecko: bool = Field(default=True, description="Enable Coingecko provider")
    enable_indexer: bool = Field(default=True, description="Enable Covalent indexer provider")

    @property
    def has_coingecko_key(self) -> bool:
        return bool(self.coingecko_api_key)

    @property
    def has_covalent_key(self) -> bool:
        return bool(self.covalent_api_key)

    @property
    def has_alchemy_key(self) -> bool:
        return bool(self.alchemy_api_key)


# Global settings instance
settings = Settings()
