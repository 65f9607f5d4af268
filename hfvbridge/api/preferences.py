from fastapi import APIRouter, Depends, HTTPException

from ..core.bridge.orchestrator import BridgeOrchestrator
from ..core.chains import ChainRegistry
from ..dependencies import get_bridge, get_preferences, get_registry
from ..services.preferences import PreferenceStore
from ..types import PreferencesResponse, PreferencesUpdate

router = APIRouter(prefix="/preferences")


@router.get("")
async def read_preferences(preferences: PreferenceStore = Depends(get_preferences)) -> PreferencesResponse:
    return PreferencesResponse(**preferences.to_dict())


@router.put("")
async def update_preferences(
    update: PreferencesUpdate,
    preferences: PreferenceStore = Depends(get_preferences),
    registry: ChainRegistry = Depends(get_registry),
    bridge: BridgeOrchestrator = Depends(get_bridge),
) -> PreferencesResponse:
    for chain_id in (update.source_chain_id, update.destination_chain_id):
        if chain_id is not None and not registry.is_supported(chain_id):
            raise HTTPException(status_code=400, detail=f"Unsupported chain: {chain_id}")

    before = preferences.to_dict()
    preferences.set_chains(update.source_chain_id, update.destination_chain_id)
    if update.flip:
        preferences.flip()
    if preferences.to_dict() != before:
        # Selection changed: any quote computed for the old pair is stale
        bridge.invalidate()
    return PreferencesResponse(**preferences.to_dict())
