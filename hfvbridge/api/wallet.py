from fastapi import APIRouter, Depends

from ..core.wallet import WalletSessionManager
from ..dependencies import get_bridge, get_preferences, get_wallet
from ..core.bridge.orchestrator import BridgeOrchestrator
from ..logging_config import bind_wallet_context
from ..services.preferences import PreferenceStore
from ..types import SwitchChainRequest, WalletStatusResponse

router = APIRouter(prefix="/wallet")


def _status(wallet: WalletSessionManager) -> WalletStatusResponse:
    session = wallet.session
    if session is None:
        return WalletStatusResponse(state=wallet.state.value)
    return WalletStatusResponse(**session.to_dict())


@router.get("")
async def wallet_status(wallet: WalletSessionManager = Depends(get_wallet)) -> WalletStatusResponse:
    return _status(wallet)


@router.post("/connect")
async def wallet_connect(wallet: WalletSessionManager = Depends(get_wallet)) -> WalletStatusResponse:
    await wallet.connect()
    bind_wallet_context(wallet.address, wallet.chain_id)
    return _status(wallet)


@router.post("/restore")
async def wallet_restore(wallet: WalletSessionManager = Depends(get_wallet)) -> WalletStatusResponse:
    await wallet.restore_session()
    bind_wallet_context(wallet.address, wallet.chain_id)
    return _status(wallet)


@router.post("/disconnect")
async def wallet_disconnect(
    wallet: WalletSessionManager = Depends(get_wallet),
    bridge: BridgeOrchestrator = Depends(get_bridge),
) -> WalletStatusResponse:
    await wallet.disconnect()
    bridge.invalidate()
    bind_wallet_context(None, None)
    return _status(wallet)


@router.post("/switch-chain")
async def wallet_switch_chain(
    req: SwitchChainRequest,
    wallet: WalletSessionManager = Depends(get_wallet),
    preferences: PreferenceStore = Depends(get_preferences),
) -> WalletStatusResponse:
    await wallet.switch_chain(req.chain_id)
    preferences.set_chains(source_chain_id=req.chain_id)
    bind_wallet_context(wallet.address, wallet.chain_id)
    return _status(wallet)
