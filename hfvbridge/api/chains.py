from fastapi import APIRouter, Depends, Query

from ..core.chains import ChainRegistry
from ..dependencies import get_registry
from ..types import ChainInfo, ChainsResponse

router = APIRouter(prefix="/chains")


@router.get("")
async def list_chains(
    with_rpc: bool = Query(default=False, description="Only chains with a configured RPC endpoint"),
    registry: ChainRegistry = Depends(get_registry),
) -> ChainsResponse:
    chains = registry.with_rpc() if with_rpc else registry.all()
    items = [
        ChainInfo(
            chain_id=chain.chain_id,
            key=chain.key,
            name=chain.name,
            symbol=chain.symbol,
            has_rpc=chain.has_rpc,
            explorer_url=chain.explorer_url,
            has_router=bool(chain.router_address),
        )
        for chain in chains
    ]
    return ChainsResponse(chains=items, count=len(items))
