"""Bridge orchestration components."""

from typing import TYPE_CHECKING

from .models import BridgePath, BridgeQuote, BridgeRequest, BridgeResult
from .router import RouterContract, RouterQuote
from .strategy import PathOutcome, run_with_fallback

if TYPE_CHECKING:  # pragma: no cover
    from .orchestrator import BridgeOrchestrator

__all__ = [
    "BridgeOrchestrator",
    "BridgePath",
    "BridgeQuote",
    "BridgeRequest",
    "BridgeResult",
    "PathOutcome",
    "RouterContract",
    "RouterQuote",
    "run_with_fallback",
]


def __getattr__(name: str):  # pragma: no cover - simple thunk
    if name == "BridgeOrchestrator":
        from .orchestrator import BridgeOrchestrator as _BridgeOrchestrator

        return _BridgeOrchestrator
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
