from fastapi import APIRouter, Depends

from ..core.bridge.orchestrator import BridgeOrchestrator
from ..dependencies import get_bridge
from ..errors import StaleQuote
from ..types import BridgeExecuteRequest, BridgeExecuteResponse, BridgeQuoteRequest, BridgeQuoteResponse

router = APIRouter(prefix="/bridge")


@router.post("/quote")
async def post_bridge_quote(
    req: BridgeQuoteRequest,
    bridge: BridgeOrchestrator = Depends(get_bridge),
) -> BridgeQuoteResponse:
    request = bridge.build_request(
        req.source_chain_id,
        req.destination_chain_id,
        req.token,
        req.amount,
        req.recipient,
    )
    quote = await bridge.get_quote(request)
    return BridgeQuoteResponse(**quote.to_dict())


@router.post("/execute")
async def post_bridge_execute(
    req: BridgeExecuteRequest,
    bridge: BridgeOrchestrator = Depends(get_bridge),
) -> BridgeExecuteResponse:
    quote = bridge.current_quote
    if quote is None or quote.quote_id != req.quote_id:
        raise StaleQuote(f"Quote {req.quote_id} is not the current quote; request a new quote")
    result = await bridge.execute(quote)
    return BridgeExecuteResponse(**result.to_dict())


@router.delete("/quote")
async def discard_quote(bridge: BridgeOrchestrator = Depends(get_bridge)):
    bridge.invalidate()
    return {"discarded": True}
