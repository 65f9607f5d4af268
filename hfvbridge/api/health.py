from fastapi import APIRouter, Depends
from typing import Dict, Any

from ..core.wallet import WalletSessionManager
from ..dependencies import get_prices, get_registry, get_wallet
from ..core.chains import ChainRegistry
from ..services.prices import PriceOracleClient

router = APIRouter()


@router.get("/healthz")
async def health_check(
    prices: PriceOracleClient = Depends(get_prices),
    registry: ChainRegistry = Depends(get_registry),
    wallet: WalletSessionManager = Depends(get_wallet),
) -> Dict[str, Any]:
    """Health check endpoint that verifies provider status"""

    provider_status = {"coingecko": await prices.ping()}

    available_providers = sum(
        1 for status in provider_status.values()
        if status["status"] == "healthy"
    )

    return {
        "status": "healthy" if available_providers == len(provider_status) else "degraded",
        "providers": provider_status,
        "available_providers": available_providers,
        "total_providers": len(provider_status),
        "chains": registry.chain_count,
        "chains_with_rpc": len(registry.with_rpc()),
        "wallet": wallet.state.value,
    }
