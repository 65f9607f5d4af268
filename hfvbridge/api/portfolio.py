from fastapi import APIRouter, Depends, HTTPException, Query
from typing import List, Optional

from ..core.chains import ChainRegistry
from ..dependencies import get_portfolio_aggregator, get_registry
from ..services.discovery import DiscoveryMode
from ..services.evm import is_valid_address
from ..services.portfolio import PortfolioAggregator
from ..types import PortfolioResponse

router = APIRouter(prefix="/portfolio")


@router.get("/{address}")
async def get_portfolio(
    address: str,
    chain: Optional[List[str]] = Query(default=None, description="Chain ids or keys; all chains when omitted"),
    mode: Optional[DiscoveryMode] = Query(default=None, description="hybrid, onchain-only or indexer-only"),
    include_dust: bool = Query(default=True, description="Include holdings below the dust threshold in 'all'"),
    aggregator: PortfolioAggregator = Depends(get_portfolio_aggregator),
    registry: ChainRegistry = Depends(get_registry),
) -> PortfolioResponse:
    if not is_valid_address(address):
        raise HTTPException(status_code=422, detail=f"Invalid address: {address}")

    chain_ids = None
    if chain:
        chain_ids = []
        for value in chain:
            chain_id = int(value) if value.isdigit() else registry.get_chain_id(value)
            if chain_id is None or not registry.is_supported(chain_id):
                raise HTTPException(status_code=400, detail=f"Unsupported chain: {value}")
            chain_ids.append(chain_id)

    portfolio = await aggregator.get_portfolio(address, chain_ids, mode=mode)
    payload = portfolio.to_dict()
    if not include_dust:
        payload["all"] = [entry.to_dict() for entry in portfolio.visible_entries()]
    return PortfolioResponse(**payload)
