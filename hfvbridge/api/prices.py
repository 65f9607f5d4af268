from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from ..core.chains import ChainRegistry
from ..dependencies import get_prices, get_registry
from ..services.prices import PriceOracleClient
from ..types import NativePricesResponse

router = APIRouter(prefix="/prices")


@router.get("/native")
async def native_prices(
    chain_id: Optional[List[int]] = Query(default=None, description="Chain ids; all chains when omitted"),
    prices: PriceOracleClient = Depends(get_prices),
    registry: ChainRegistry = Depends(get_registry),
) -> NativePricesResponse:
    chain_ids = chain_id or registry.chain_ids()
    by_chain = await prices.many_native_prices(chain_ids)
    return NativePricesResponse(prices={str(key): value for key, value in by_chain.items()})


@router.get("/token/{chain_id}/{address}")
async def token_price(
    chain_id: int,
    address: str,
    prices: PriceOracleClient = Depends(get_prices),
):
    info = await prices.token_metadata_and_price(chain_id, address)
    return {"chain_id": chain_id, "address": address.lower(), "token": info}
